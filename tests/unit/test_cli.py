from __future__ import annotations

import json
from unittest.mock import AsyncMock

from src.extractor.models import Term, TermCategory
from src.matching.models import Match, MatchKind
from src.pipeline.models import PipelineResult, PipelineStage


def _write(path, text: str):
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_without_mode_prints_help(capsys) -> None:
    from src.__main__ import main

    assert main([]) == 0
    assert "job-fit" in capsys.readouterr().out


def test_cli_parser_reads_run_flags(tmp_path) -> None:
    from src.__main__ import create_parser

    parsed = create_parser().parse_args(
        [
            "run",
            "--source",
            "resume.txt",
            "--job",
            "job.txt",
            "--template",
            "template.json",
            "--job-terms",
            "SQL, Tableau,,",
            "--no-summary",
            "--pdf",
        ]
    )

    assert parsed.mode == "run"
    assert parsed.no_summary is True
    assert parsed.no_bullets is False
    assert parsed.pdf is True
    assert parsed.job_terms == "SQL, Tableau,,"
    assert parsed.out_run_dir is None


def test_cli_extract_terms_writes_terms_json(tmp_path, sample_resume_text) -> None:
    from src.__main__ import main

    source = _write(tmp_path / "resume.txt", sample_resume_text)
    out_dir = tmp_path / "out"

    exit_code = main(["extract-terms", "--source", str(source), "--out-run-dir", str(out_dir)])

    assert exit_code == 0
    terms = json.loads((out_dir / "terms.json").read_text(encoding="utf-8"))
    assert {"text": "Power BI", "category": "technologies"} in [
        {"text": t["text"], "category": t["category"]} for t in terms
    ]


def test_cli_match_writes_matches_json(monkeypatch, tmp_path, sample_resume_text) -> None:
    from src.__main__ import main

    match = Match(
        term=Term(text="SQL", category=TermCategory.TECHNOLOGIES),
        kind=MatchKind.EXACT,
        confidence=1.0,
    )
    mock = AsyncMock(return_value=[match])
    monkeypatch.setattr("src.matching.service.TermMatchingService.match", mock)

    source = _write(tmp_path / "resume.txt", sample_resume_text)
    job = _write(tmp_path / "job.txt", "SQL analyst")
    out_dir = tmp_path / "out"

    exit_code = main(
        [
            "match",
            "--source",
            str(source),
            "--job",
            str(job),
            "--job-terms",
            "SQL, Tableau",
            "--out-run-dir",
            str(out_dir),
        ]
    )

    assert exit_code == 0
    assert mock.call_args.args[1] == "SQL analyst"
    assert mock.call_args.args[2] == ["SQL", "Tableau"]
    matches = json.loads((out_dir / "matches.json").read_text(encoding="utf-8"))
    assert matches[0]["kind"] == "exact"


def test_cli_normalize_writes_document(tmp_path, sample_template) -> None:
    from src.__main__ import main

    template = _write(tmp_path / "template.json", json.dumps(sample_template))
    out_dir = tmp_path / "out"

    exit_code = main(["normalize", "--template", str(template), "--out-run-dir", str(out_dir)])

    assert exit_code == 0
    document = json.loads((out_dir / "document.json").read_text(encoding="utf-8"))
    assert document["data"]["sections"]["education"]["items"][0]["school"] == "State University"
    assert document["data"]["metadata"]["layout"]["pages"][0]["sidebar"] == ["skills"]


def test_cli_normalize_rejects_malformed_template(tmp_path, capsys) -> None:
    from src.__main__ import main

    template = _write(tmp_path / "template.json", "{not json")

    exit_code = main(
        ["normalize", "--template", str(template), "--out-run-dir", str(tmp_path / "out")]
    )

    assert exit_code == 1
    assert "malformed" in capsys.readouterr().err


def test_cli_run_calls_pipeline(monkeypatch, tmp_path, sample_resume_text) -> None:
    from src.__main__ import main

    mock = AsyncMock(
        return_value=PipelineResult(
            success=True, stage=PipelineStage.NORMALIZE, document={"data": {}}
        )
    )
    monkeypatch.setattr("src.pipeline.service.JobFitPipeline.run", mock)

    source = _write(tmp_path / "resume.txt", sample_resume_text)
    job = _write(tmp_path / "job.txt", "BI analyst")
    out_dir = tmp_path / "out"

    exit_code = main(
        [
            "run",
            "--source",
            str(source),
            "--job",
            str(job),
            "--template",
            str(tmp_path / "template.json"),
            "--title",
            "BI Analyst",
            "--no-bullets",
            "--submit",
            "--out-run-dir",
            str(out_dir),
        ]
    )

    assert exit_code == 0
    request = mock.call_args.args[0]
    assert request.target.title == "BI Analyst"
    assert request.enhance_bullets is False
    assert request.tailor_summary is True
    assert request.submit is True
    assert request.export_pdf is False
    assert json.loads((out_dir / "result.json").read_text(encoding="utf-8"))["success"]
    assert json.loads((out_dir / "document.json").read_text(encoding="utf-8")) == {"data": {}}


def test_cli_run_reports_failed_stage(monkeypatch, tmp_path, capsys) -> None:
    from src.__main__ import main

    mock = AsyncMock(
        return_value=PipelineResult(
            success=False,
            stage=PipelineStage.IMPORT,
            error="Import failed HTTP 400 after repair",
        )
    )
    monkeypatch.setattr("src.pipeline.service.JobFitPipeline.run", mock)

    source = _write(tmp_path / "resume.txt", "resume")
    job = _write(tmp_path / "job.txt", "job")
    out_dir = tmp_path / "out"

    exit_code = main(
        [
            "run",
            "--source",
            str(source),
            "--job",
            str(job),
            "--template",
            str(tmp_path / "template.json"),
            "--out-run-dir",
            str(out_dir),
        ]
    )

    assert exit_code == 1
    assert "Error at stage 'import'" in capsys.readouterr().err
    assert (out_dir / "result.json").exists()
    assert not (out_dir / "document.json").exists()


def test_cli_missing_source_file_errors_cleanly(tmp_path) -> None:
    from src.__main__ import main

    exit_code = main(
        ["extract-terms", "--source", str(tmp_path / "missing.txt"), "--out-run-dir", str(tmp_path)]
    )

    assert exit_code == 1
