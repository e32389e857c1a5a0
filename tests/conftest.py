"""Pytest configuration and shared fixtures."""

import copy
from unittest.mock import AsyncMock, MagicMock

import pytest

SAMPLE_RESUME = """Jane Doe
jane.doe@example.com | +1 555 010 2030 | Austin, TX

Summary
Data analyst with six years of experience turning raw operational data into
dashboards and forecasts for finance and supply-chain teams.

Experience
Senior Data Analyst, Acme Corp (2019 - 2024)
• Built dashboards in Power BI and SQL for the finance team
• Automated monthly reporting to cut close time by 30%
• Coordinated vendor onboarding with procurement

Skills
Python, SQL, Power BI, Excel, Tableau
"""

SAMPLE_JOB = """Business Intelligence Analyst

We are looking for an analyst who requires strong Python skills and
experience with SQL, Power BI and data visualization. You will build
dashboards, automate reporting, and partner with finance on forecasting.
Familiarity with Snowflake is a plus.
"""

SAMPLE_TEMPLATE = {
    "data": {
        "basics": {"name": "Jane Doe", "email": "jane.doe@example.com"},
        "summary": {
            "title": "Summary",
            "content": "Data analyst with six years of experience turning raw "
            "operational data into dashboards and forecasts.",
        },
        "sections": {
            "experience": {
                "title": "Experience",
                "items": [
                    {
                        "company": "Acme Corp",
                        "position": "Senior Data Analyst",
                        "date": "2019 - 2024",
                        "description": [
                            "Built dashboards for the finance team",
                            "Automated monthly reporting to cut close time by 30%",
                        ],
                    }
                ],
            },
            "education": {
                "items": [
                    {
                        "institution": "State University",
                        "studyType": "BSc Statistics",
                        "score": "3.8",
                    }
                ]
            },
            "skills": {
                "items": [
                    {"name": "Analytics", "keywords": ["Python", "SQL", "Power BI"]}
                ]
            },
        },
        "metadata": {"theme": {"primary": "#1d4ed8"}},
    }
}


@pytest.fixture
def sample_resume_text() -> str:
    """Plain-text resume used across tests."""
    return SAMPLE_RESUME


@pytest.fixture
def sample_job_text() -> str:
    """Plain-text job posting used across tests."""
    return SAMPLE_JOB


@pytest.fixture
def sample_template() -> dict:
    """A fresh copy of a small legacy-shaped template."""
    return copy.deepcopy(SAMPLE_TEMPLATE)


def llm_response(content: str | None) -> MagicMock:
    """A litellm-style completion response carrying ``content``."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.choices[0].message.tool_calls = None
    return response


@pytest.fixture
def mock_llm():
    """An LLMClient double with async generate_text/generate_json."""
    llm = MagicMock()
    llm.generate_text = AsyncMock()
    llm.generate_json = AsyncMock()
    return llm
