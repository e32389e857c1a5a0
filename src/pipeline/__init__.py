"""Job-fit resume synthesis pipeline orchestration.

Main Entry Point:
    JobFitPipeline - Runs extract, match, fill, tailor, normalize and import

Example:
    from src.pipeline import JobFitPipeline, PipelineRequest

    result = await JobFitPipeline().run(
        PipelineRequest(source_text=resume, target=target, template=template)
    )
    if result.success:
        print(result.document)
"""

from src.pipeline.models import (
    PipelineError,
    PipelineRequest,
    PipelineResult,
    PipelineStage,
)
from src.pipeline.service import JobFitPipeline

__all__ = [
    "JobFitPipeline",
    "PipelineRequest",
    "PipelineResult",
    "PipelineStage",
    "PipelineError",
]
