"""Pattern battery for terminology extraction.

Rules are applied in the order of PATTERN_BATTERY. A later rule never claims
text that an earlier rule already matched, so specific names (``Power BI``)
win over generic shapes (the acronym ``BI``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.extractor.models import TermCategory

TECHNOLOGY_NAMES = (
    ".NET",
    "Airflow",
    "Alteryx",
    "Angular",
    "Ansible",
    "AWS",
    "Azure",
    "Bash",
    "C#",
    "C++",
    "CSS",
    "Databricks",
    "Django",
    "Docker",
    "Excel",
    "FastAPI",
    "Flask",
    "GCP",
    "Git",
    "GitHub",
    "GitLab",
    "Google Analytics",
    "Google Cloud",
    "GraphQL",
    "Hadoop",
    "HTML",
    "Java",
    "JavaScript",
    "Jenkins",
    "Kafka",
    "Kubernetes",
    "Linux",
    "Looker",
    "MATLAB",
    "Microsoft 365",
    "Microsoft Office",
    "MongoDB",
    "MySQL",
    "Node.js",
    "NumPy",
    "Office 365",
    "Pandas",
    "PostgreSQL",
    "Power Apps",
    "Power Automate",
    "Power BI",
    "Power Query",
    "PowerPoint",
    "PowerShell",
    "Python",
    "PyTorch",
    "Qlik",
    "React",
    "REST API",
    "SAS",
    "scikit-learn",
    "Snowflake",
    "Spark",
    "SPSS",
    "SQL",
    "SQL Server",
    "Stata",
    "Tableau",
    "TensorFlow",
    "Terraform",
    "TypeScript",
    "VBA",
    "Visio",
)

SYSTEM_NAMES = (
    "ADP",
    "Ariba",
    "Cerner",
    "Confluence",
    "Coupa",
    "Dynamics 365",
    "Epic",
    "HubSpot",
    "Jira",
    "Kronos",
    "Maximo",
    "Microsoft Dynamics",
    "NetSuite",
    "Oracle",
    "PeopleSoft",
    "QuickBooks",
    "Salesforce",
    "SAP",
    "SAP S/4HANA",
    "ServiceNow",
    "SharePoint",
    "Workday",
    "Zendesk",
)

CERTIFICATION_NAMES = (
    "CAPM",
    "CFA",
    "CISA",
    "CISM",
    "CISSP",
    "CMA",
    "CompTIA A+",
    "CompTIA Network+",
    "CompTIA Security+",
    "CPA",
    "CSM",
    "PHR",
    "PMI-ACP",
    "PMP",
    "Security+",
    "SHRM-CP",
    "SHRM-SCP",
    "SPHR",
)

PROCESS_PHRASES = (
    "Agile",
    "budget management",
    "change management",
    "CI/CD",
    "code review",
    "configuration management",
    "continuous improvement",
    "DevOps",
    "incident management",
    "ITIL",
    "Kanban",
    "Lean",
    "process improvement",
    "program management",
    "project management",
    "quality assurance",
    "quality control",
    "requirements gathering",
    "risk management",
    "root cause analysis",
    "Scrum",
    "SDLC",
    "Six Sigma",
    "sprint planning",
    "stakeholder management",
    "strategic planning",
    "test automation",
    "user acceptance testing",
    "vendor management",
    "Waterfall",
    "workflow automation",
)

DOMAIN_PHRASES = (
    "business intelligence",
    "cybersecurity",
    "data analysis",
    "data governance",
    "data science",
    "data visualization",
    "financial analysis",
    "financial reporting",
    "machine learning",
    "public health",
    "regulatory compliance",
    "supply chain",
)

STOPWORDS = (
    "a",
    "across",
    "all",
    "an",
    "and",
    "as",
    "at",
    "by",
    "excellent",
    "experience",
    "for",
    "from",
    "in",
    "including",
    "into",
    "its",
    "of",
    "on",
    "or",
    "our",
    "proven",
    "skills",
    "strong",
    "such",
    "that",
    "the",
    "their",
    "this",
    "to",
    "using",
    "with",
    "your",
)

# Upper-case tokens that are not terminology
ACRONYM_STOPLIST = frozenset(
    {
        "A", "AM", "AND", "BA", "BS", "CEO", "CFO", "CO", "COO", "CTO", "EU",
        "EVP", "FOR", "GPA", "I", "ID", "IN", "INC", "LLC", "LTD", "MA", "MBA",
        "MS", "NA", "NEW", "OF", "OK", "ON", "OR", "PHD", "PM", "SKILLS",
        "SUMMARY", "SVP", "TBD", "THE", "TO", "UK", "US", "USA", "VP", "WORK",
    }
)

_PROCESS_HEADS = (
    "improvement",
    "lifecycle",
    "management",
    "methodology",
    "methodologies",
    "planning",
    "reengineering",
    "workflows?",
)

_DOMAIN_HEADS = (
    "accounting",
    "acquisition",
    "analysis",
    "analytics",
    "auditing",
    "budgeting",
    "compliance",
    "forecasting",
    "governance",
    "logistics",
    "modell?ing",
    "polic(?:y|ies)",
    "procurement",
    "reporting",
    "security",
)

_WORD = r"(?!(?:%s)\b)[A-Za-z][A-Za-z0-9/&+-]*" % "|".join(STOPWORDS)


@dataclass(frozen=True)
class PatternRule:
    """One category-specific lexical pattern.

    Attributes:
        name: Short rule name used in debug logging.
        category: Category assigned to every match.
        pattern: Compiled pattern; group ``term`` (or the whole match) is the term.
        exclude: Upper-case texts this rule never emits.
    """

    name: str
    category: TermCategory
    pattern: re.Pattern[str]
    exclude: frozenset[str] = frozenset()


def _names_pattern(names: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "SQL Server" wins over "SQL"
    ordered = sorted(names, key=len, reverse=True)
    alternation = "|".join(re.escape(name) for name in ordered)
    return re.compile(
        rf"(?<![\w+#.])(?P<term>{alternation})(?![\w+#])", re.IGNORECASE
    )


def _compound_pattern(heads: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(
        rf"\b(?P<term>(?:{_WORD}[ \t]+){{1,2}}(?:{'|'.join(heads)}))\b",
        re.IGNORECASE,
    )


PATTERN_BATTERY: tuple[PatternRule, ...] = (
    PatternRule(
        "technology-names", TermCategory.TECHNOLOGIES, _names_pattern(TECHNOLOGY_NAMES)
    ),
    PatternRule(
        "symbolic-tools",
        TermCategory.TECHNOLOGIES,
        re.compile(
            r"(?<![\w.])(?P<term>[A-Za-z][A-Za-z0-9]*(?:\+\+|#|\.(?:js|NET|io)))(?![\w+#])"
        ),
    ),
    PatternRule("system-names", TermCategory.SYSTEMS, _names_pattern(SYSTEM_NAMES)),
    PatternRule(
        "named-systems",
        TermCategory.SYSTEMS,
        re.compile(
            r"\b(?P<term>(?:(?!(?:The|A|An|Our|Their|This)\b)[A-Z][A-Za-z0-9&-]+[ \t]+){1,3}"
            r"(?:System|Platform|Portal|Database)s?)\b"
        ),
    ),
    PatternRule(
        "certification-names",
        TermCategory.CERTIFICATIONS,
        _names_pattern(CERTIFICATION_NAMES),
    ),
    PatternRule(
        "belt-certifications",
        TermCategory.CERTIFICATIONS,
        re.compile(
            r"\b(?P<term>(?:Lean[ \t]+)?Six[ \t]+Sigma[ \t]+(?:White|Yellow|Green|Black)[ \t]+Belt)\b",
            re.IGNORECASE,
        ),
    ),
    PatternRule(
        "certified-titles",
        TermCategory.CERTIFICATIONS,
        re.compile(
            r"\b(?P<term>(?:Certified|Registered|Licensed)(?:[ \t]+[A-Z][\w+-]*){1,5})"
        ),
    ),
    PatternRule(
        "certification-suffix",
        TermCategory.CERTIFICATIONS,
        re.compile(
            r"\b(?P<term>(?:[A-Z][\w+/-]*[ \t]+){1,4}(?:Certification|Certificate|License))\b"
        ),
    ),
    PatternRule(
        "clearances",
        TermCategory.CERTIFICATIONS,
        re.compile(
            r"(?P<term>\bTS/SCI\b|\b(?:Top[ \t]+Secret|Secret|Public[ \t]+Trust)"
            r"(?:[ \t]+Security)?[ \t]+Clearance\b)"
        ),
    ),
    PatternRule(
        "process-phrases", TermCategory.PROCESSES, _names_pattern(PROCESS_PHRASES)
    ),
    PatternRule(
        "process-compounds", TermCategory.PROCESSES, _compound_pattern(_PROCESS_HEADS)
    ),
    PatternRule("domain-phrases", TermCategory.DOMAIN, _names_pattern(DOMAIN_PHRASES)),
    PatternRule(
        "domain-compounds", TermCategory.DOMAIN, _compound_pattern(_DOMAIN_HEADS)
    ),
    PatternRule(
        "acronyms",
        TermCategory.SYSTEMS,
        re.compile(r"(?<![\w/-])(?P<term>[A-Z][A-Z0-9&]{1,6})s?(?![\w/-])"),
        exclude=ACRONYM_STOPLIST,
    ),
)
