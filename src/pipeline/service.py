"""Job-fit pipeline orchestration.

Runs the stages in order on a single WorkingDocument::

    input -> extract -> match -> fill -> tailor -> normalize -> import

The document is owned by one run, mutated by one stage at a time and frozen
before it reaches the rendering service.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from src.config.settings import Settings, get_settings
from src.extractor.job_fields import JobFieldService
from src.extractor.service import TermExtractor
from src.llm.client import LLMClient, LLMError
from src.matching.service import TermMatchingService
from src.normalizer.fill import SectionFillService
from src.normalizer.safety import RenderSafetyError, validate_source_text
from src.normalizer.service import DocumentNormalizer
from src.normalizer.template import TemplateError, load_template
from src.pipeline.models import PipelineError, PipelineResult, PipelineStage
from src.renderer.client import MAX_ERROR_BODY_CHARS
from src.renderer.models import RendererError, RendererValidationError
from src.renderer.service import ImportRepairService, build_pdf_filename
from src.tailoring.cover_letter import CoverLetterService
from src.tailoring.service import TailoringService

if TYPE_CHECKING:
    from src.extractor.models import TargetJob
    from src.normalizer.document import WorkingDocument
    from src.pipeline.models import PipelineRequest

logger = logging.getLogger(__name__)


class JobFitPipeline:
    """Runs the job-fit resume synthesis pipeline.

    Every collaborator can be injected; defaults are built from the global
    configuration and share one LLMClient.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm: LLMClient | None = None,
        extractor: TermExtractor | None = None,
        job_fields: JobFieldService | None = None,
        matcher: TermMatchingService | None = None,
        filler: SectionFillService | None = None,
        tailoring: TailoringService | None = None,
        cover_letters: CoverLetterService | None = None,
        normalizer: DocumentNormalizer | None = None,
        importer: ImportRepairService | None = None,
    ):
        self.settings = settings or get_settings()
        self._llm = llm
        self.extractor = extractor or TermExtractor()
        self.normalizer = normalizer or DocumentNormalizer()
        self._job_fields = job_fields
        self._matcher = matcher
        self._filler = filler
        self._tailoring = tailoring
        self._cover_letters = cover_letters
        self._importer = importer

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = LLMClient()
        return self._llm

    @property
    def job_fields(self) -> JobFieldService:
        if self._job_fields is None:
            self._job_fields = JobFieldService(llm=self.llm)
        return self._job_fields

    @property
    def matcher(self) -> TermMatchingService:
        if self._matcher is None:
            self._matcher = TermMatchingService(llm=self.llm)
        return self._matcher

    @property
    def filler(self) -> SectionFillService:
        if self._filler is None:
            self._filler = SectionFillService(llm=self.llm)
        return self._filler

    @property
    def tailoring(self) -> TailoringService:
        if self._tailoring is None:
            self._tailoring = TailoringService(llm=self.llm)
        return self._tailoring

    @property
    def cover_letters(self) -> CoverLetterService:
        if self._cover_letters is None:
            self._cover_letters = CoverLetterService(llm=self.llm)
        return self._cover_letters

    @property
    def importer(self) -> ImportRepairService:
        if self._importer is None:
            self._importer = ImportRepairService(normalizer=self.normalizer)
        return self._importer

    async def run(self, request: PipelineRequest) -> PipelineResult:
        """Run every requested stage.

        Args:
            request: Source text, target job, template and stage flags.

        Returns:
            PipelineResult. On failure ``success`` is False, ``stage`` names
            the failed stage and no document is attached.
        """
        result = PipelineResult(success=False, stage=PipelineStage.INPUT)
        try:
            await self._run_stages(request, result)
        except PipelineError as e:
            logger.error(f"Pipeline failed at {e.stage.value}: {e.message}")
            return PipelineResult(
                success=False,
                stage=e.stage,
                error=e.message,
                diagnostic=e.diagnostic,
                issues=result.issues,
                terms=result.terms,
                matches=result.matches,
            )

        result.success = True
        logger.info(f"Pipeline finished (last stage: {result.stage.value})")
        return result

    async def _run_stages(self, request: PipelineRequest, result: PipelineResult) -> None:
        document = self._load_input(request)
        target = request.target

        result.stage = PipelineStage.EXTRACT
        result.terms = self.extractor.extract(request.source_text)
        if request.widen_target_terms and not target.terms:
            target = await self._widen_target(target)
        logger.info(f"Extracted {len(result.terms)} terms")

        result.stage = PipelineStage.MATCH
        result.matches = await self.matcher.match(
            result.terms, target.description, target.terms
        )

        if request.fill_sections:
            result.stage = PipelineStage.FILL
            result.fill = await self.filler.fill(document, request.source_text)

        if request.tailor_summary or request.enhance_bullets:
            result.stage = PipelineStage.TAILOR
            result.tailoring = await self.tailoring.tailor(
                document,
                request.source_text,
                target,
                result.matches,
                rewrite_summary=request.tailor_summary,
                enhance_bullets=request.enhance_bullets,
            )

        if request.cover_letter:
            try:
                result.cover_letter = await self.cover_letters.generate_body(
                    request.source_text, target
                )
            except LLMError as e:
                logger.warning(f"Cover letter generation failed: {e}")

        result.stage = PipelineStage.NORMALIZE
        try:
            result.normalization = self.normalizer.normalize(document)
        except RenderSafetyError as e:
            raise PipelineError(
                PipelineStage.NORMALIZE, str(e), diagnostic="; ".join(e.problems)
            ) from e
        document.freeze()

        if request.submit or request.export_pdf:
            result.stage = PipelineStage.IMPORT
            await self._import(document, target, request.export_pdf, result)

        result.document = document.to_payload()

    def _load_input(self, request: PipelineRequest) -> WorkingDocument:
        text = request.source_text or ""
        if len(text.strip()) < self.settings.min_source_chars:
            raise PipelineError(PipelineStage.INPUT, "Source text is empty")
        if len(text) > self.settings.max_source_chars:
            raise PipelineError(
                PipelineStage.INPUT,
                f"Source text is {len(text)} characters; the limit is "
                f"{self.settings.max_source_chars}",
            )
        if not request.target.description.strip():
            raise PipelineError(PipelineStage.INPUT, "Target job description is empty")

        report = validate_source_text(text)
        if not report.accepted:
            raise PipelineError(
                PipelineStage.INPUT,
                "Source text does not look like a resume",
                diagnostic="; ".join(report.issues),
            )

        try:
            return load_template(_template_source(request.template))
        except TemplateError as e:
            raise PipelineError(PipelineStage.INPUT, str(e)) from e

    async def _widen_target(self, target: TargetJob) -> TargetJob:
        try:
            fields = await self.job_fields.extract(target.description)
        except (LLMError, ValueError) as e:
            logger.warning(f"Job field extraction failed; matching on text only: {e}")
            return target
        return target.model_copy(
            update={
                "terms": fields.all_terms(),
                "title": target.title or fields.title or None,
                "company": target.company or fields.company or None,
            }
        )

    async def _import(
        self,
        document: WorkingDocument,
        target: TargetJob,
        export_pdf: bool,
        result: PipelineResult,
    ) -> None:
        try:
            result.import_result = await self.importer.submit(document)
            if export_pdf:
                result.pdf_url = await self.importer.export_pdf(
                    result.import_result.resume_id
                )
        except RendererValidationError as e:
            result.issues = [issue.model_dump(mode="json") for issue in e.issues]
            raise PipelineError(
                PipelineStage.IMPORT, str(e), diagnostic=_truncate(e.body)
            ) from e
        except RendererError as e:
            raise PipelineError(
                PipelineStage.IMPORT, str(e), diagnostic=_truncate(e.body)
            ) from e

        name = document.get(("data", "basics", "name"))
        result.pdf_filename = build_pdf_filename(name, target.title, target.company)


def _template_source(template: dict | Path | str) -> dict | Path | str:
    # A string that is not JSON text is a file path
    if isinstance(template, str) and not template.lstrip().startswith("{"):
        return Path(template)
    return template


def _truncate(body: str | None) -> str | None:
    return body[:MAX_ERROR_BODY_CHARS] if body else body
