"""Content tailoring module.

This module provides functionality for:
- Rewriting the professional summary toward a target job (bounded retry
  ladder with a deterministic fallback)
- Injecting matched terms into resume bullets, at most one per bullet
- Generating cover letter bodies

Main Entry Point:
    TailoringService - Applies summary and bullet tailoring to a WorkingDocument

Example:
    from src.tailoring import TailoringService

    report = await TailoringService().tailor(document, resume_text, target, matches)
    print(report.summary.state, report.injected_count)
"""

from src.tailoring.bullets import BulletEnhancer, TermUsage
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.cover_letter import CoverLetterService, cleanup_letter_body
from src.tailoring.models import (
    CoverLetterBody,
    SummaryAttempt,
    SummaryRewriteResult,
    SummaryState,
    TailoredBullet,
)
from src.tailoring.sanitize import sanitize_generated_text
from src.tailoring.service import TailoringReport, TailoringService
from src.tailoring.summary import SummaryRewriter, deterministic_summary

__all__ = [
    # Main service
    "TailoringService",
    "TailoringReport",
    # Configuration
    "TailoringConfig",
    "get_tailoring_config",
    # Sub-services
    "SummaryRewriter",
    "BulletEnhancer",
    "TermUsage",
    "CoverLetterService",
    # Helpers
    "sanitize_generated_text",
    "cleanup_letter_body",
    "deterministic_summary",
    # Models
    "TailoredBullet",
    "SummaryState",
    "SummaryAttempt",
    "SummaryRewriteResult",
    "CoverLetterBody",
]
