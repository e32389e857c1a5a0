"""Main Tailoring Service.

Applies the summary rewrite and bullet enhancement to a WorkingDocument.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from src.llm.client import LLMClient
from src.normalizer.fill import apply_summary
from src.normalizer.text import split_bullets
from src.tailoring.bullets import BulletEnhancer
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.summary import SummaryRewriter

if TYPE_CHECKING:
    from src.extractor.models import TargetJob
    from src.matching.models import Match
    from src.normalizer.document import WorkingDocument
    from src.tailoring.models import SummaryRewriteResult, TailoredBullet

logger = logging.getLogger(__name__)


@dataclass
class TailoringReport:
    """Result of tailoring one document."""

    summary: SummaryRewriteResult | None = None
    bullets: list[TailoredBullet] = field(default_factory=list)
    term_usage: dict[str, int] = field(default_factory=dict)
    completed_at: datetime = field(default_factory=datetime.now)

    @property
    def injected_count(self) -> int:
        return sum(1 for b in self.bullets if b.changed)


class TailoringService:
    """Main service for content tailoring.

    Orchestrates:
    1. Summary rewrite (state machine with deterministic fallback)
    2. Bullet enhancement across every experience item, sharing one
       term usage counter
    """

    def __init__(
        self,
        config: TailoringConfig | None = None,
        llm: LLMClient | None = None,
    ):
        """Initialize the tailoring service.

        Args:
            config: Optional TailoringConfig. Uses global config if not provided.
            llm: Optional LLMClient shared by the sub-services.
        """
        self.config = config or get_tailoring_config()
        self.summary_rewriter = SummaryRewriter(config=self.config, llm=llm)
        self.bullet_enhancer = BulletEnhancer(config=self.config)

    async def tailor(
        self,
        document: WorkingDocument,
        source_text: str,
        target: TargetJob,
        matches: list[Match],
        rewrite_summary: bool = True,
        enhance_bullets: bool = True,
    ) -> TailoringReport:
        """Tailor the document's summary and experience bullets in place.

        Args:
            document: Mutable working document.
            source_text: Source resume text.
            target: Target job.
            matches: Ranked matches from the Term Matcher.
            rewrite_summary: Whether to rewrite the summary.
            enhance_bullets: Whether to inject terms into bullets.

        Returns:
            TailoringReport describing what changed.
        """
        report = TailoringReport()
        data = document.data

        if rewrite_summary:
            summary = data.get("summary") if isinstance(data.get("summary"), dict) else {}
            basics = data.get("basics") if isinstance(data.get("basics"), dict) else {}
            report.summary = await self.summary_rewriter.rewrite(
                source_text,
                str(summary.get("content") or ""),
                target,
                matches,
                candidate_name=basics.get("name") or None,
            )
            if report.summary.text:
                apply_summary(document, report.summary.text)

        if enhance_bullets and matches:
            usage = self.bullet_enhancer.new_usage()
            for path, item in _experience_items(data):
                if document.is_protected(path + ("description",)):
                    continue
                bullets = split_bullets(item.get("description"))
                if not bullets:
                    continue
                tailored = self.bullet_enhancer.enhance(bullets, matches, usage)
                item["description"] = [b.text for b in tailored]
                report.bullets.extend(tailored)
            report.term_usage = usage.as_dict()

        logger.info(
            f"Tailoring complete: summary="
            f"{report.summary.state.value if report.summary else 'skipped'}, "
            f"bullets injected={report.injected_count}/{len(report.bullets)}"
        )
        return report


def _experience_items(data: dict):
    section = (data.get("sections") or {}).get("experience")
    if not isinstance(section, dict) or not isinstance(section.get("items"), list):
        return
    for index, item in enumerate(section["items"]):
        if isinstance(item, dict):
            yield ("data", "sections", "experience", "items", index), item
