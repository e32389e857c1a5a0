"""Document normalization service.

Runs the normalization stages over a WorkingDocument in a fixed order:
legacy relocation, schema hardening, field migration, text normalization,
visibility, layout and page policy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.normalizer.config import NormalizerConfig, get_normalizer_config
from src.normalizer.layout import (
    apply_layout,
    apply_page_policy,
    apply_sidebar_constraints,
    apply_visibility,
)
from src.normalizer.migration import migrate_item_fields, relocate_legacy_nodes
from src.normalizer.safety import check_render_safety
from src.normalizer.schema import DOCUMENT_SCHEMA, Nested, harden
from src.normalizer.text import TextNormalizer

if TYPE_CHECKING:
    from src.normalizer.document import DocPath, WorkingDocument

logger = logging.getLogger(__name__)


@dataclass
class NormalizationReport:
    """What a normalization run changed."""

    relocated: list[str] = field(default_factory=list)
    hardened: list[DocPath] = field(default_factory=list)
    renamed: int = 0
    pages: list[dict] = field(default_factory=list)
    constrained: int = 0
    safety_fixes: list[str] = field(default_factory=list)


class DocumentNormalizer:
    """Brings a WorkingDocument into the renderer's canonical shape."""

    def __init__(
        self,
        config: NormalizerConfig | None = None,
        schema: Nested = DOCUMENT_SCHEMA,
    ):
        """Initialize the normalizer.

        Args:
            config: Optional NormalizerConfig. Uses global config if not provided.
            schema: Root schema rule used for hardening.
        """
        self.config = config or get_normalizer_config()
        self.schema = schema

    def harden(self, document: WorkingDocument) -> list[DocPath]:
        """Relocate legacy nodes and fill every missing schema value.

        Args:
            document: Mutable working document.

        Returns:
            Paths that were set.
        """
        relocate_legacy_nodes(document.data)
        changes = harden(document.root, self.schema)
        if changes:
            logger.debug(f"Schema hardening set {len(changes)} values")
        return changes

    def normalize(self, document: WorkingDocument) -> NormalizationReport:
        """Run every normalization stage.

        Args:
            document: Mutable working document.

        Returns:
            NormalizationReport describing the changes.

        Raises:
            DocumentFrozenError: If the document is frozen.
            RenderSafetyError: If the result would still render corrupted.
        """
        data = document.data
        report = NormalizationReport()

        report.relocated = relocate_legacy_nodes(data)
        report.hardened = harden(document.root, self.schema)
        report.renamed = migrate_item_fields(data)

        TextNormalizer(document.protected).normalize_data(data)
        apply_visibility(data)

        report.pages = apply_layout(data, self.config)
        report.constrained = apply_sidebar_constraints(data, report.pages, self.config)
        apply_page_policy(data["metadata"], self.config)
        report.safety_fixes = check_render_safety(data, self.config.max_keyword_chars)

        logger.info(
            f"Normalized document: {len(report.hardened)} defaults, "
            f"{report.renamed} renames, {len(report.pages)} page(s)"
        )
        return report
