"""Import/Repair service: submit, repair once, resubmit.

The submitted document is always a private copy of the frozen
WorkingDocument. On a 4xx validation response the copy is patched at the
reported paths, hardened again and resubmitted exactly once.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from src.normalizer.document import WorkingDocument
from src.normalizer.service import DocumentNormalizer
from src.renderer.client import MAX_ERROR_BODY_CHARS, RendererClient, parse_maybe_json_string
from src.renderer.config import RendererConfig, get_renderer_config
from src.renderer.models import ImportResult, RendererError, RendererValidationError
from src.renderer.repair import apply_repair_patches, build_payload, parse_validation_errors

if TYPE_CHECKING:
    import httpx

    from src.renderer.models import RepairPatch

logger = logging.getLogger(__name__)

# Patch-and-resubmit rounds after the first submission
MAX_REPAIR_ROUNDS = 1

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ImportRepairService:
    """Submits normalized documents to the rendering service."""

    def __init__(
        self,
        config: RendererConfig | None = None,
        client: RendererClient | None = None,
        normalizer: DocumentNormalizer | None = None,
    ):
        """Initialize the service.

        Args:
            config: Optional RendererConfig. Uses global config if not provided.
            client: Optional RendererClient. Built from config if not provided.
            normalizer: Normalizer used to re-harden a repaired copy.
        """
        self.config = config or get_renderer_config()
        self.client = client or RendererClient(config=self.config)
        self.normalizer = normalizer or DocumentNormalizer()

    async def submit(self, document: WorkingDocument) -> ImportResult:
        """Import a document, repairing validation errors at most once.

        Args:
            document: The (normally frozen) document. It is never modified.

        Returns:
            ImportResult with the renderer's resume id.

        Raises:
            RendererValidationError: If validation still fails after the
                repair round; carries the remaining issues.
            RendererError: For network, timeout and other non-2xx failures.
        """
        payload = build_payload(document)
        applied: list[RepairPatch] = []
        submissions = 0

        while True:
            response = await self.client.import_resume(payload)
            submissions += 1

            if response.is_success:
                resume_id = _resume_id(response.text)
                logger.info(
                    f"Imported resume {resume_id} after {submissions} submission(s)"
                )
                return ImportResult(
                    resume_id=resume_id,
                    submissions=submissions,
                    patches=applied,
                    payload=payload,
                )

            patches = (
                parse_validation_errors(response.text)
                if 400 <= response.status_code < 500
                else []
            )
            if not patches:
                raise _failure(response, submissions)
            if submissions > MAX_REPAIR_ROUNDS:
                raise RendererValidationError(
                    f"Import failed HTTP {response.status_code} after repair: "
                    f"{len(patches)} issue(s) remain",
                    status_code=response.status_code,
                    body=response.text,
                    issues=patches,
                )

            logger.warning(
                f"Import rejected with {len(patches)} validation issue(s); repairing"
            )
            apply_repair_patches(payload, patches)
            repaired = WorkingDocument(payload, protected=document.protected)
            self.normalizer.harden(repaired)
            applied.extend(patches)
            payload = build_payload(repaired)

    async def export_pdf(self, resume_id: str) -> str:
        """Return the PDF URL for an imported resume."""
        url = await self.client.get_pdf_url(resume_id)
        logger.info(f"PDF ready for resume {resume_id}")
        return url

    async def save_pdf(self, pdf_url: str, directory: Path, filename: str) -> Path:
        """Download a rendered PDF into directory.

        Returns:
            Path of the written file.
        """
        content = await self.client.download(pdf_url)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_bytes(content)
        logger.info(f"Saved PDF to {path}")
        return path


def _resume_id(text: str) -> str:
    value = parse_maybe_json_string(text)
    if isinstance(value, dict):
        value = value.get("id") or value.get("resumeId") or ""
    resume_id = str(value).strip()
    if not resume_id:
        raise RendererError("Rendering service returned an empty resume id", body=text)
    return resume_id


def _failure(response: httpx.Response, submissions: int) -> RendererError:
    suffix = " after repair" if submissions > 1 else ""
    return RendererError(
        f"Import failed HTTP {response.status_code}{suffix}: "
        f"{response.text[:MAX_ERROR_BODY_CHARS]}",
        status_code=response.status_code,
        body=response.text,
    )


def build_pdf_filename(name: str | None, position: str | None, company: str | None) -> str:
    """``Name_Position_Company.pdf`` with unsafe characters replaced.

    Empty parts are skipped; with no parts at all the name is ``resume.pdf``.
    """
    parts = []
    for part in (name, position, company):
        cleaned = _UNSAFE_FILENAME_CHARS.sub("_", (part or "").strip()).strip("_.")
        if cleaned:
            parts.append(cleaned)
    return f"{'_'.join(parts) or 'resume'}.pdf"
