"""Main entry point for the job-fit pipeline."""

import argparse
import asyncio
import json
import sys
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from src import __version__
from src.config.settings import Settings
from src.utils.logging import configure_logging


def _timestamp_run_id(prefix: str) -> str:
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}"


def _resolve_run_dir(
    settings: Settings, *, prefix: str, out_run_dir: Path | None
) -> Path:
    if out_run_dir is not None:
        run_dir = out_run_dir
    else:
        run_dir = settings.output_dir / "runs" / _timestamp_run_id(prefix)
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _write_json(path: Path, payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json")
        return str(value)

    path.write_text(
        json.dumps(payload, indent=2, default=_default),
        encoding="utf-8",
    )


def _split_terms(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _add_out_run_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--out-run-dir",
        type=Path,
        default=None,
        help="Optional output run directory (defaults under artifacts/runs/)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="job-fit",
        description="Job-fit resume synthesis: extract, match, tailor, normalize, import",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src extract-terms --source resume.txt
  python -m src match --source resume.txt --job job.txt
  python -m src normalize --template template.json
  python -m src run --source resume.txt --job job.txt --template template.json --submit
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="modes",
        description="Available operating modes",
    )

    # Component mode: extract-terms
    extract_parser = subparsers.add_parser(
        "extract-terms",
        help="Extract categorized terms from text (text -> terms.json)",
    )
    extract_parser.add_argument(
        "--source", type=Path, required=True, help="Path to a UTF-8 text file"
    )
    _add_out_run_dir(extract_parser)

    # Component mode: match
    match_parser = subparsers.add_parser(
        "match",
        help="Match source terms against a job description (-> matches.json)",
    )
    match_parser.add_argument(
        "--source", type=Path, required=True, help="Path to source resume text"
    )
    match_parser.add_argument(
        "--job", type=Path, required=True, help="Path to job description text"
    )
    match_parser.add_argument(
        "--job-terms",
        default=None,
        help="Comma-separated pre-extracted job terms used to widen matching",
    )
    _add_out_run_dir(match_parser)

    # Component mode: normalize
    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Harden and normalize a template (-> document.json)",
    )
    normalize_parser.add_argument(
        "--template",
        type=Path,
        required=True,
        help="Path to template (JSON or YAML)",
    )
    _add_out_run_dir(normalize_parser)

    # Full pipeline
    run_parser = subparsers.add_parser(
        "run",
        help="Run the full pipeline (-> result.json, document.json)",
    )
    run_parser.add_argument(
        "--source", type=Path, required=True, help="Path to source resume text"
    )
    run_parser.add_argument(
        "--job", type=Path, required=True, help="Path to job description text"
    )
    run_parser.add_argument(
        "--template",
        type=Path,
        required=True,
        help="Path to template (JSON or YAML)",
    )
    run_parser.add_argument("--title", default=None, help="Target job title")
    run_parser.add_argument("--company", default=None, help="Target company")
    run_parser.add_argument(
        "--job-terms",
        default=None,
        help="Comma-separated pre-extracted job terms used to widen matching",
    )
    run_parser.add_argument(
        "--no-summary",
        action="store_true",
        help="Keep the template summary instead of rewriting it",
    )
    run_parser.add_argument(
        "--no-bullets",
        action="store_true",
        help="Do not inject matched terms into experience bullets",
    )
    run_parser.add_argument(
        "--fill",
        action="store_true",
        help="Fill template sections from the source text first",
    )
    run_parser.add_argument(
        "--cover-letter",
        action="store_true",
        help="Also generate a cover letter body",
    )
    run_parser.add_argument(
        "--submit",
        action="store_true",
        help="Import the document into the rendering service",
    )
    run_parser.add_argument(
        "--pdf",
        action="store_true",
        help="Export and download a PDF (implies --submit)",
    )
    _add_out_run_dir(run_parser)

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    # If no mode specified, show help
    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.info(f"job-fit v{__version__} starting in {parsed.mode} mode")

    try:
        if parsed.mode == "extract-terms":
            return _extract_terms(parsed, settings)
        if parsed.mode == "match":
            return _match(parsed, settings)
        if parsed.mode == "normalize":
            return _normalize(parsed, settings)
        if parsed.mode == "run":
            return _run(parsed, settings)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def _extract_terms(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.extractor.service import TermExtractor

    run_dir = _resolve_run_dir(
        settings, prefix="terms", out_run_dir=parsed.out_run_dir
    )
    terms = TermExtractor().extract(_read_text(parsed.source))
    _write_json(run_dir / "terms.json", terms)

    counts = Counter(term.category.value for term in terms)
    print(f"Wrote: {run_dir / 'terms.json'}")
    print(f"Terms: {len(terms)}")
    for category, count in counts.items():
        print(f"  {category}: {count}")
    return 0


def _match(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.extractor.service import TermExtractor
    from src.matching.service import TermMatchingService

    run_dir = _resolve_run_dir(
        settings, prefix="match", out_run_dir=parsed.out_run_dir
    )
    terms = TermExtractor().extract(_read_text(parsed.source))
    matches = asyncio.run(
        TermMatchingService().match(
            terms, _read_text(parsed.job), _split_terms(parsed.job_terms)
        )
    )
    _write_json(run_dir / "matches.json", matches)

    print(f"Wrote: {run_dir / 'matches.json'}")
    print(f"Matched {len(matches)} of {len(terms)} terms")
    for match in matches[:10]:
        print(f"  {match.kind.value:8} {match.confidence:.2f}  {match.term.text}")
    return 0


def _normalize(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.normalizer.safety import RenderSafetyError
    from src.normalizer.service import DocumentNormalizer
    from src.normalizer.template import TemplateError, load_template

    run_dir = _resolve_run_dir(
        settings, prefix="normalize", out_run_dir=parsed.out_run_dir
    )
    try:
        document = load_template(parsed.template)
        report = DocumentNormalizer().normalize(document)
    except (TemplateError, RenderSafetyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _write_json(run_dir / "document.json", document.to_payload())
    print(f"Wrote: {run_dir / 'document.json'}")
    print(f"Hardened values: {len(report.hardened)}")
    print(f"Renamed fields: {report.renamed}")
    print(f"Pages: {len(report.pages)}")
    return 0


def _run(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.extractor.models import TargetJob
    from src.pipeline.models import PipelineRequest
    from src.pipeline.service import JobFitPipeline
    from src.renderer.models import RendererError

    run_dir = _resolve_run_dir(settings, prefix="run", out_run_dir=parsed.out_run_dir)
    request = PipelineRequest(
        source_text=_read_text(parsed.source),
        target=TargetJob(
            description=_read_text(parsed.job),
            title=parsed.title,
            company=parsed.company,
            terms=_split_terms(parsed.job_terms),
        ),
        template=parsed.template,
        tailor_summary=not parsed.no_summary,
        enhance_bullets=not parsed.no_bullets,
        fill_sections=parsed.fill,
        cover_letter=parsed.cover_letter,
        submit=parsed.submit or parsed.pdf,
        export_pdf=parsed.pdf,
    )

    pipeline = JobFitPipeline(settings=settings)
    result = asyncio.run(pipeline.run(request))
    result.save_json(run_dir / "result.json")
    print(f"Wrote: {run_dir / 'result.json'}")

    if not result.success:
        print(
            f"Error at stage '{result.stage.value}': {result.error}",
            file=sys.stderr,
        )
        if result.diagnostic:
            print(result.diagnostic, file=sys.stderr)
        return 1

    _write_json(run_dir / "document.json", result.document)
    print(f"Wrote: {run_dir / 'document.json'}")
    if result.cover_letter:
        (run_dir / "cover_letter.txt").write_text(result.cover_letter.text, encoding="utf-8")
        print(f"Wrote: {run_dir / 'cover_letter.txt'}")
    if result.import_result:
        print(f"Resume id: {result.import_result.resume_id}")
    if result.pdf_url and result.pdf_filename:
        try:
            path = asyncio.run(
                pipeline.importer.save_pdf(result.pdf_url, run_dir, result.pdf_filename)
            )
        except RendererError as e:
            print(f"Error downloading PDF: {e}", file=sys.stderr)
            return 1
        print(f"Wrote: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
