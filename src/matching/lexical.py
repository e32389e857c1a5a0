"""Lexical matching utilities for the Term Matcher."""

from __future__ import annotations

import re
from collections import Counter

from src.extractor.patterns import SYSTEM_NAMES, TECHNOLOGY_NAMES

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#./-]*")
_WORD_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9+#./-]*")

_KNOWN_TOOLS = frozenset(name.lower() for name in TECHNOLOGY_NAMES + SYSTEM_NAMES)

CANDIDATE_STOPWORDS = frozenset(
    {
        "about", "above", "across", "after", "all", "also", "and", "any", "are",
        "able", "ability", "based", "been", "being", "both", "but", "can",
        "candidate", "candidates", "duties", "each", "ensure", "etc", "every",
        "experience", "for", "from", "has", "have", "highly", "including",
        "into", "its", "job", "may", "more", "must", "new", "not", "one", "other",
        "our", "over", "per", "plus", "position", "preferred", "provide",
        "required", "requirements", "requires", "responsibilities", "role",
        "should", "skills", "strong", "such", "team", "that", "the", "their",
        "them", "then", "these", "this", "through", "under", "using", "various",
        "well", "what", "when", "where", "which", "while", "who", "will", "with",
        "within", "work", "working", "years", "you", "your",
    }
)


def normalize_text(text: str) -> str:
    """Lower-case and collapse whitespace for containment checks."""
    return re.sub(r"\s+", " ", text.strip().lower())


def tokenize(text: str, min_length: int = 3) -> set[str]:
    """Split text into lower-case tokens of at least ``min_length`` characters.

    Symbols meaningful in tool names ("+", "#", ".") are kept inside tokens;
    trailing sentence punctuation is dropped.
    """
    tokens = set()
    for raw in _TOKEN_RE.findall(text.lower()):
        token = raw.rstrip("./-")
        if len(token) >= min_length:
            tokens.add(token)
    return tokens


def overlap_ratio(term_tokens: set[str], target_tokens: set[str]) -> float:
    """|intersection| / min(|term|, |target|); 0.0 when either side is empty."""
    if not term_tokens or not target_tokens:
        return 0.0
    shared = term_tokens & target_tokens
    return len(shared) / min(len(term_tokens), len(target_tokens))


def contains_term(term_text: str, haystack: str) -> bool:
    """Case-insensitive substring containment."""
    needle = normalize_text(term_text)
    if not needle:
        return False
    return needle in normalize_text(haystack)


def is_technical(word: str) -> bool:
    """Whether a word looks like a tool, acronym or technical token."""
    if word.lower() in _KNOWN_TOOLS:
        return True
    if any(ch.isdigit() for ch in word) or any(ch in "+#./" for ch in word):
        return True
    return len(word) >= 2 and word.isupper()


def candidate_phrases(text: str, limit: int) -> list[str]:
    """Rank single words and two-word phrases from the target text.

    Scores are occurrence counts, doubled for technical-looking words and
    multiplied by 1.5 for two-word phrases. Ties keep first-appearance order.

    Args:
        text: Target job description text.
        limit: Maximum number of candidates to return.

    Returns:
        Candidate phrases in display casing, best first.
    """
    words = [w.rstrip("./-") for w in _WORD_RE.findall(text)]
    scores: Counter[str] = Counter()
    display: dict[str, str] = {}

    def add(phrase: str, weight: float) -> None:
        key = phrase.lower()
        display.setdefault(key, phrase)
        scores[key] += weight

    previous: str | None = None
    for word in words:
        lower = word.lower()
        if (len(word) < 3 and not is_technical(word)) or lower in CANDIDATE_STOPWORDS:
            previous = None
            continue
        add(word, 2.0 if is_technical(word) else 1.0)
        if previous is not None:
            add(f"{previous} {word}", 1.5)
        previous = word

    order = {key: index for index, key in enumerate(display)}
    ranked = sorted(scores, key=lambda key: (-scores[key], order[key]))
    return [display[key] for key in ranked[:limit]]
