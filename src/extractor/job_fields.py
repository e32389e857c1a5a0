"""Job posting field extraction via the text-generation service."""

from __future__ import annotations

import logging

from src.extractor.models import MAX_KSAS, JobFields
from src.llm.client import LLMClient

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 50000

JOB_FIELDS_PROMPT = """Extract fields from this job posting.

Return a JSON object with EXACTLY these keys:
{{
  "title": "job title as written in the posting",
  "company": "hiring organization",
  "ksas": ["up to {max_ksas} knowledge, skill or ability terms, most important first"],
  "acronyms": ["acronyms that appear in the posting"]
}}

Rules:
- Copy terms as they appear in the posting; do not invent requirements.
- Prefer concrete tools, systems, methods and domain phrases over soft skills.
- Use "" for a field that is not stated.

JOB POSTING:
{job_text}
"""


class JobFieldService:
    """Extracts title, company, KSAs and acronyms from a job posting."""

    def __init__(self, llm: LLMClient | None = None):
        """Initialize the service.

        Args:
            llm: Optional LLMClient. A default client is created if not provided.
        """
        self.llm = llm or LLMClient()

    async def extract(self, job_text: str) -> JobFields:
        """Extract structured fields from job posting text.

        Args:
            job_text: Job posting text. Text beyond MAX_INPUT_CHARS is ignored.

        Returns:
            JobFields with at most MAX_KSAS KSAs and upper-cased acronyms.

        Raises:
            ValueError: If the job text is empty.
            LLMError: If the text-generation service fails.
        """
        text = (job_text or "").strip()
        if not text:
            raise ValueError("Job text is empty")

        if len(text) > MAX_INPUT_CHARS:
            logger.warning(
                f"Job text truncated from {len(text)} to {MAX_INPUT_CHARS} chars"
            )
            text = text[:MAX_INPUT_CHARS]

        fields = await self.llm.generate_json(
            prompt=JOB_FIELDS_PROMPT.format(max_ksas=MAX_KSAS, job_text=text),
            output_model=JobFields,
            temperature=0.1,
        )
        logger.info(
            f"Extracted job fields: title='{fields.title}', company='{fields.company}', "
            f"{len(fields.ksas)} KSAs, {len(fields.acronyms)} acronyms"
        )
        return fields
