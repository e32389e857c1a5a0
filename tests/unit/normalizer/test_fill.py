"""Unit tests for section fill."""

import pytest

from src.llm.client import LLMError
from src.normalizer.document import SUMMARY_CONTENT_PATH, WorkingDocument
from src.normalizer.fill import (
    BasicsPatch,
    ItemsPatch,
    SectionFillService,
    SummaryPatch,
    apply_basics,
    apply_items,
    copy_known_keys,
    extract_summary_by_heading,
    is_verbatim_excerpt,
)
from src.normalizer.template import load_template

SUMMARY_TEXT = (
    "Data analyst with six years of experience turning raw operational data into "
    "dashboards and forecasts for finance and supply-chain teams."
)


def _fake_generate_json(summary: str, failing: tuple[str, ...] = ()):
    async def fake(**kwargs):
        model = kwargs["output_model"]
        prompt = kwargs["prompt"]
        if model is BasicsPatch:
            return BasicsPatch(name="Jane Doe", email="jane.doe@example.com", website="https://jane.dev")
        if model is SummaryPatch:
            return SummaryPatch(content=summary)
        for key in failing:
            if f'"{key}"' in prompt:
                raise LLMError(f"{key} failed")
        if '"experience"' in prompt:
            return ItemsPatch(
                items=[
                    {
                        "company": "Acme Corp",
                        "position": "Senior Data Analyst",
                        "period": "2019 - 2024",
                        "description": ["Built dashboards in Power BI and SQL", "• Automated reporting"],
                        "bogus": "dropped",
                    }
                ]
            )
        return ItemsPatch(items=[])

    return fake


class TestHelpers:
    """Tests for fill helpers."""

    def test_verbatim_excerpt_ignores_whitespace(self, sample_resume_text):
        assert is_verbatim_excerpt("turning raw   operational data", sample_resume_text)
        assert not is_verbatim_excerpt("turning refined data", sample_resume_text)
        assert not is_verbatim_excerpt("", sample_resume_text)

    def test_summary_by_heading(self, sample_resume_text):
        assert extract_summary_by_heading(sample_resume_text) == SUMMARY_TEXT

    def test_summary_by_heading_missing(self):
        assert extract_summary_by_heading("Jane Doe\nExperience\nAnalyst") == ""

    def test_apply_basics_keeps_existing_values_for_blanks(self):
        data = {"basics": {"name": "Old", "phone": "555"}}

        apply_basics(data, BasicsPatch(name="Jane Doe", website="https://jane.dev"))

        assert data["basics"]["name"] == "Jane Doe"
        assert data["basics"]["phone"] == "555"
        assert data["basics"]["website"] == {"label": "", "url": "https://jane.dev"}

    def test_copy_known_keys_blanks_template_values(self):
        shape = {"company": "Template Co", "date": "2000", "website": {"url": "x", "label": "y"}}

        item = copy_known_keys(shape, {"company": "Acme", "website": {"url": "a"}, "extra": 1})

        assert item == {"company": "Acme", "date": "", "website": {"url": "a", "label": ""}}

    def test_apply_items_shapes_and_splits(self, sample_template):
        data = sample_template["data"]

        count = apply_items(
            data,
            "experience",
            [{"company": "Beta", "description": "• One\n• Two", "bogus": 1}, "not an item"],
        )

        assert count == 1
        item = data["sections"]["experience"]["items"][0]
        assert item["company"] == "Beta"
        assert item["position"] == ""
        assert item["description"] == ["One", "Two"]
        assert item["hidden"] is False
        assert item["id"]
        assert "bogus" not in item

    def test_apply_items_creates_missing_section(self):
        data: dict = {}

        apply_items(data, "languages", [{"name": "Spanish", "description": "Fluent"}])

        assert data["sections"]["languages"]["items"][0]["name"] == "Spanish"


class TestSectionFillService:
    """Tests for SectionFillService.fill."""

    @pytest.mark.asyncio
    async def test_fill_from_source(self, mock_llm, sample_resume_text):
        mock_llm.generate_json.side_effect = _fake_generate_json(SUMMARY_TEXT)
        document = WorkingDocument({"data": {}})
        service = SectionFillService(llm=mock_llm)

        report = await service.fill(document, sample_resume_text, sections=("experience",))

        assert report.filled == ["basics", "summary", "experience"]
        assert report.summary_source == "llm"
        assert document.data["basics"]["name"] == "Jane Doe"
        assert document.data["summary"]["content"] == SUMMARY_TEXT
        assert document.is_protected(SUMMARY_CONTENT_PATH)
        item = document.data["sections"]["experience"]["items"][0]
        assert item["description"] == ["Built dashboards in Power BI and SQL", "Automated reporting"]
        assert "bogus" not in item

    @pytest.mark.asyncio
    async def test_non_verbatim_summary_uses_heading(self, mock_llm, sample_resume_text):
        mock_llm.generate_json.side_effect = _fake_generate_json(
            "An invented summary that the resume never says."
        )
        document = load_template({"data": {"summary": {"content": "Old"}}})

        report = await SectionFillService(llm=mock_llm).fill(
            document, sample_resume_text, sections=()
        )

        assert report.summary_source == "heading"
        assert document.data["summary"]["content"] == SUMMARY_TEXT

    @pytest.mark.asyncio
    async def test_failed_section_is_recorded(self, mock_llm, sample_resume_text, sample_template):
        mock_llm.generate_json.side_effect = _fake_generate_json(SUMMARY_TEXT, failing=("skills",))
        document = load_template(sample_template)

        report = await SectionFillService(llm=mock_llm).fill(
            document, sample_resume_text, sections=("skills", "experience")
        )

        assert "skills" in report.failed
        assert "experience" in report.filled
        assert document.data["sections"]["skills"]["items"][0]["name"] == "Analytics"
