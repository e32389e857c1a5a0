"""Terminology extraction.

This module scans free text (resume or job history) for categorized
terminology candidates using a fixed battery of lexical patterns, and can
ask the text-generation service for the key fields of a job posting.

Public API:
    - TermExtractor: deterministic pattern-based extractor
    - JobFieldService: LLM-backed job posting field extraction
    - Term, TermCategory, TargetJob, JobFields: data models
"""

from src.extractor.job_fields import JobFieldService
from src.extractor.models import JobFields, TargetJob, Term, TermCategory
from src.extractor.service import TermExtractor

__all__ = [
    "TermExtractor",
    "JobFieldService",
    "Term",
    "TermCategory",
    "TargetJob",
    "JobFields",
]
