"""Section fill: copying resume content from source text into the document.

Each section is requested separately from the text-generation service and
merged into the template shape. Only keys the template already knows, plus a
per-section allow-list, are copied. The summary is extracted in verbatim
mode: a result that is not literally present in the source is discarded.
"""

from __future__ import annotations

import copy
import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.llm.client import LLMClient, LLMError
from src.normalizer.document import SUMMARY_CONTENT_PATH, WorkingDocument
from src.normalizer.text import normalize_verbatim, split_bullets

logger = logging.getLogger(__name__)

MAX_SOURCE_CHARS = 50000

BASICS_FIELDS = ("name", "headline", "email", "phone", "location")

SECTION_EXTRAS: dict[str, tuple[str, ...]] = {
    "experience": ("company", "position", "location", "period", "description", "website"),
    "education": ("school", "degree", "area", "grade", "location", "period", "description", "website"),
    "skills": ("name", "description", "level", "keywords"),
    "certifications": ("name", "issuer", "period", "description", "website"),
    "languages": ("name", "description", "level"),
}

SECTION_GUIDES = {
    "experience": (
        'Each item: {"company", "position", "location", "period", "description"}. '
        '"description" is a JSON array of 3 bullet strings copied VERBATIM from the '
        "resume (no rewording, no bullet glyphs)."
    ),
    "education": (
        'Each item: {"school", "degree", "area", "grade", "location", "period", "description"}.'
    ),
    "skills": (
        'At most 4 items. Each item: {"name", "description", "keywords"} where '
        '"keywords" is an array of 4-6 skills taken from the resume.'
    ),
    "certifications": 'Each item: {"name", "issuer", "period", "description"}.',
    "languages": 'Each item: {"name", "description"} where description is the proficiency.',
}

_SUMMARY_HEADING = re.compile(
    r"(?:^|\n)[ \t]*(?:professional[ \t]+)?(?:summary|profile)[ \t]*:?[ \t]*\n"
    r"(?P<body>[\s\S]+?)"
    r"(?=\n[ \t]*(?:work[ \t]+)?(?:experience|skills|education)\b|\Z)",
    re.IGNORECASE,
)

FILL_SYSTEM_PROMPT = """You copy information from a resume into JSON.

Rules:
- Use ONLY information present in the resume. Never invent employers, dates, titles or skills.
- Use "" for anything the resume does not state.
- Output ONLY valid JSON.
"""


class BasicsPatch(BaseModel):
    """Contact block extracted from the resume."""

    name: str = Field(default="", description="Full name")
    headline: str = Field(default="", description="Professional headline")
    email: str = Field(default="", description="Email address")
    phone: str = Field(default="", description="Phone number")
    location: str = Field(default="", description="City/region")
    website: str = Field(default="", description="Personal website URL")

    @field_validator("*", mode="before")
    @classmethod
    def none_to_empty(cls, v: object) -> object:
        return "" if v is None else v


class SummaryPatch(BaseModel):
    """Summary paragraph copied from the resume."""

    content: str = Field(default="", description="Summary text, verbatim")


class ItemsPatch(BaseModel):
    """Section items extracted from the resume."""

    items: list[dict[str, Any]] = Field(default_factory=list)


@dataclass
class FillReport:
    """What the section fill changed."""

    filled: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    summary_source: str | None = None


class SectionFillService:
    """Fills basics, summary and section items from resume text."""

    def __init__(self, llm: LLMClient | None = None):
        """Initialize the service.

        Args:
            llm: Optional LLMClient. A default client is created if not provided.
        """
        self.llm = llm or LLMClient()

    async def fill(
        self,
        document: WorkingDocument,
        source_text: str,
        sections: tuple[str, ...] = tuple(SECTION_EXTRAS),
    ) -> FillReport:
        """Fill the document from source text.

        Every part is independent: a failed request leaves that part of the
        template untouched and is recorded in the report.

        Args:
            document: Mutable working document.
            source_text: Resume text.
            sections: Section keys to fill.

        Returns:
            FillReport listing filled and failed parts.
        """
        report = FillReport()
        resume = source_text[:MAX_SOURCE_CHARS]

        try:
            basics = await self.llm.generate_json(
                prompt=_prompt("the contact block (basics)", BASICS_PROMPT_GUIDE, resume),
                output_model=BasicsPatch,
                system_prompt=FILL_SYSTEM_PROMPT,
                temperature=0.1,
            )
            apply_basics(document.data, basics)
            report.filled.append("basics")
        except LLMError as e:
            logger.warning(f"Basics fill failed: {e}")
            report.failed["basics"] = str(e)

        report.summary_source = await self._fill_summary(document, resume)
        if report.summary_source:
            report.filled.append("summary")

        for key in sections:
            try:
                patch = await self.llm.generate_json(
                    prompt=_prompt(f'the "{key}" section', SECTION_GUIDES.get(key, ""), resume),
                    output_model=ItemsPatch,
                    system_prompt=FILL_SYSTEM_PROMPT,
                    temperature=0.1,
                )
            except LLMError as e:
                logger.warning(f"Section fill failed for {key}: {e}")
                report.failed[key] = str(e)
                continue
            apply_items(document.data, key, patch.items)
            report.filled.append(key)

        logger.info(
            f"Section fill: filled={report.filled}, failed={list(report.failed)}"
        )
        return report

    async def _fill_summary(self, document: WorkingDocument, resume: str) -> str | None:
        extracted = ""
        try:
            patch = await self.llm.generate_json(
                prompt=_prompt("the summary paragraph", SUMMARY_PROMPT_GUIDE, resume),
                output_model=SummaryPatch,
                system_prompt=FILL_SYSTEM_PROMPT,
                temperature=0.0,
            )
            extracted = patch.content
        except LLMError as e:
            logger.warning(f"Summary extraction failed, trying heading fallback: {e}")

        if extracted and is_verbatim_excerpt(extracted, resume):
            apply_summary(document, extracted)
            return "llm"

        if extracted:
            logger.warning("Extracted summary is not verbatim; discarding it")

        fallback = extract_summary_by_heading(resume)
        if fallback:
            apply_summary(document, fallback)
            return "heading"
        return None


BASICS_PROMPT_GUIDE = (
    'Return {"name", "headline", "email", "phone", "location", "website"}.'
)
SUMMARY_PROMPT_GUIDE = (
    'Return {"content": "..."} with the resume\'s own summary/profile paragraph '
    "copied EXACTLY, character for character. Do not rephrase, shorten or merge. "
    'Return {"content": ""} if the resume has no summary.'
)


def _prompt(target: str, guide: str, resume: str) -> str:
    return "\n".join(
        [
            f"Extract {target} from this resume.",
            guide,
            'For sections return {"items": [...]}.' if "section" in target else "",
            "",
            "RESUME:",
            resume,
        ]
    )


def is_verbatim_excerpt(excerpt: str, source: str) -> bool:
    """Whether excerpt appears in source up to whitespace."""
    needle = normalize_verbatim(excerpt)
    return bool(needle) and needle in normalize_verbatim(source)


def extract_summary_by_heading(source: str) -> str:
    """Text under a "Summary" heading, up to the next major heading."""
    match = _SUMMARY_HEADING.search(source)
    if not match:
        return ""
    return normalize_verbatim(match.group("body"))


def apply_basics(data: dict, patch: BasicsPatch) -> None:
    """Copy non-empty basics fields into the document."""
    basics = data.setdefault("basics", {})
    for name in BASICS_FIELDS:
        value = getattr(patch, name).strip()
        if value:
            basics[name] = value
    if patch.website.strip():
        website = basics.get("website")
        if not isinstance(website, dict):
            website = basics["website"] = {"label": "", "url": ""}
        website["url"] = patch.website.strip()


def apply_summary(document: WorkingDocument, text: str) -> None:
    """Write the summary in verbatim mode and mark it protected."""
    summary = document.data.setdefault("summary", {})
    summary["content"] = normalize_verbatim(text)
    document.protect(SUMMARY_CONTENT_PATH)


def apply_items(data: dict, section_key: str, raw_items: list[dict]) -> int:
    """Replace a section's items with copies shaped like the template's items.

    Returns:
        Number of items written.
    """
    sections = data.setdefault("sections", {})
    section = sections.get(section_key)
    if not isinstance(section, dict):
        section = sections[section_key] = {}
    existing = section.get("items") if isinstance(section.get("items"), list) else []
    shape = existing[0] if existing and isinstance(existing[0], dict) else {}
    allowed = SECTION_EXTRAS.get(section_key, ())

    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        item = copy_known_keys(shape, raw, allowed)
        item["id"] = uuid.uuid4().hex
        item["hidden"] = False
        if section_key == "experience":
            item["description"] = split_bullets(raw.get("description"))
        if section_key == "skills" and isinstance(item.get("keywords"), list):
            item["keywords"] = [str(k).strip() for k in item["keywords"] if str(k).strip()]
        items.append(item)

    section["items"] = items
    return len(items)


def copy_known_keys(shape: dict, source: dict, allowed: tuple[str, ...] = ()) -> dict:
    """Blank copy of ``shape`` overlaid with the source keys it knows or allows.

    Nested objects are merged key by key with the same rule.
    """
    result = blank_like(shape)
    for key, value in source.items():
        if key not in shape and key not in allowed:
            continue
        if isinstance(shape.get(key), dict) and isinstance(value, dict):
            result[key] = copy_known_keys(shape[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def blank_like(value: Any) -> Any:
    """Same structure as value with every scalar reset to its empty form."""
    if isinstance(value, dict):
        return {key: blank_like(child) for key, child in value.items()}
    if isinstance(value, list):
        return []
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return 0
    return ""
