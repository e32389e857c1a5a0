"""Import/Repair Client for the external document-rendering service.

Main Entry Point:
    ImportRepairService - Submits a frozen WorkingDocument, repairing
    validation errors at most once, and exports PDFs

Example:
    from src.renderer import ImportRepairService

    service = ImportRepairService()
    result = await service.submit(document.freeze())
    pdf_url = await service.export_pdf(result.resume_id)
"""

from src.renderer.client import RendererClient, join_url, parse_maybe_json_string
from src.renderer.config import RendererConfig, get_renderer_config
from src.renderer.models import (
    ImportResult,
    RendererError,
    RendererValidationError,
    RepairPatch,
)
from src.renderer.repair import apply_repair_patches, build_payload, parse_validation_errors
from src.renderer.service import MAX_REPAIR_ROUNDS, ImportRepairService, build_pdf_filename

__all__ = [
    # Main service
    "ImportRepairService",
    "MAX_REPAIR_ROUNDS",
    "build_pdf_filename",
    # Client
    "RendererClient",
    "join_url",
    "parse_maybe_json_string",
    # Configuration
    "RendererConfig",
    "get_renderer_config",
    # Repair
    "parse_validation_errors",
    "apply_repair_patches",
    "build_payload",
    # Models
    "RepairPatch",
    "ImportResult",
    "RendererError",
    "RendererValidationError",
]
