"""Pipeline request, result and error models."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from src.extractor.models import TargetJob, Term
from src.matching.models import Match

if TYPE_CHECKING:
    from src.normalizer.fill import FillReport
    from src.normalizer.service import NormalizationReport
    from src.renderer.models import ImportResult
    from src.tailoring.models import CoverLetterBody
    from src.tailoring.service import TailoringReport


class PipelineStage(str, Enum):
    """Pipeline stages in execution order."""

    INPUT = "input"
    EXTRACT = "extract"
    MATCH = "match"
    FILL = "fill"
    TAILOR = "tailor"
    NORMALIZE = "normalize"
    IMPORT = "import"


class PipelineError(Exception):
    """A stage failure that ends the run."""

    def __init__(
        self,
        stage: PipelineStage,
        message: str,
        diagnostic: str | None = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.diagnostic = diagnostic


class PipelineRequest(BaseModel):
    """Everything one pipeline invocation needs."""

    source_text: str = Field(..., description="Source resume / job history text")
    target: TargetJob = Field(..., description="Target job posting")
    template: dict[str, Any] | Path | str = Field(
        ..., description="Template mapping, JSON text, or path to a template file"
    )

    tailor_summary: bool = Field(default=True, description="Rewrite the summary")
    enhance_bullets: bool = Field(default=True, description="Inject terms into bullets")
    fill_sections: bool = Field(
        default=False, description="Fill template sections from the source text"
    )
    widen_target_terms: bool = Field(
        default=True,
        description="Extract job fields to widen matching when no target terms are given",
    )
    cover_letter: bool = Field(default=False, description="Generate a cover letter body")
    submit: bool = Field(default=False, description="Import into the rendering service")
    export_pdf: bool = Field(default=False, description="Request a PDF after import")


@dataclass
class PipelineResult:
    """Outcome of one pipeline invocation.

    ``document`` is only set on success; a failed run never exposes the
    partially built document.
    """

    success: bool
    stage: PipelineStage
    error: str | None = None
    diagnostic: str | None = None
    issues: list[dict] = field(default_factory=list)

    terms: list[Term] = field(default_factory=list)
    matches: list[Match] = field(default_factory=list)
    fill: FillReport | None = None
    tailoring: TailoringReport | None = None
    normalization: NormalizationReport | None = None
    cover_letter: CoverLetterBody | None = None
    import_result: ImportResult | None = None
    pdf_url: str | None = None
    pdf_filename: str | None = None
    document: dict | None = None

    completed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Return a JSON-serializable summary."""
        summary = self.tailoring.summary if self.tailoring else None
        return {
            "success": self.success,
            "stage": self.stage.value,
            "error": self.error,
            "diagnostic": self.diagnostic,
            "issues": self.issues,
            "terms": [t.model_dump(mode="json") for t in self.terms],
            "matches": [m.model_dump(mode="json") for m in self.matches],
            "summary_state": summary.state.value if summary else None,
            "bullets": (
                [b.model_dump(mode="json") for b in self.tailoring.bullets]
                if self.tailoring
                else []
            ),
            "cover_letter": self.cover_letter.text if self.cover_letter else None,
            "resume_id": self.import_result.resume_id if self.import_result else None,
            "submissions": self.import_result.submissions if self.import_result else 0,
            "pdf_url": self.pdf_url,
            "pdf_filename": self.pdf_filename,
            "completed_at": self.completed_at.isoformat(),
        }

    def save_json(self, path: str | Path) -> None:
        """Save the summary as JSON on disk."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
