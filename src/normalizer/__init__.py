"""Document normalization for the external renderer.

This module turns a template-shaped document into the renderer's canonical
shape: schema hardening with conditional defaults, field-name migration,
section layout, page policy and whitespace normalization with a strict
verbatim mode for protected fields.

Public API:
    - WorkingDocument: single-owner document tree
    - load_template / TemplateError: template loading
    - DocumentNormalizer: runs every normalization stage
    - SectionFillService: fills sections from resume text
    - NormalizerConfig / get_normalizer_config: NORMALIZER_-prefixed settings
"""

from src.normalizer.config import NormalizerConfig, get_normalizer_config
from src.normalizer.document import DocumentFrozenError, WorkingDocument
from src.normalizer.fill import FillReport, SectionFillService
from src.normalizer.safety import RenderSafetyError, validate_source_text
from src.normalizer.service import DocumentNormalizer, NormalizationReport
from src.normalizer.template import TemplateError, load_template, parse_template
from src.normalizer.text import ProtectedFieldError

__all__ = [
    "WorkingDocument",
    "DocumentFrozenError",
    "load_template",
    "parse_template",
    "TemplateError",
    "DocumentNormalizer",
    "NormalizationReport",
    "SectionFillService",
    "FillReport",
    "ProtectedFieldError",
    "RenderSafetyError",
    "validate_source_text",
    "NormalizerConfig",
    "get_normalizer_config",
]
