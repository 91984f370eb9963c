# gap_roadmap/analysis/keywords.py
"""Text heuristics shared by the analyzers: keywords, claims and related features."""

import re

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "as", "is", "was", "are", "were", "be", "been", "being",
    "that", "this", "these", "those", "will", "shall", "must", "should", "when",
    "into", "your", "have", "than", "then", "each", "also", "only", "such",
})

CLAIM_INDICATORS = (
    "supports", "enables", "provides", "allows", "can", "analyzes", "generates",
    "detects", "automatically", "intelligent", "advanced", "complete", "full",
    "comprehensive",
)

_DATE_LINE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_VERSION_LINE = re.compile(r"^v?\d+\.\d+")
_NOTE_OR_TODO = re.compile(r"\btodo\b|note:", re.IGNORECASE)
_INDICATOR = re.compile(r"\b(?:" + "|".join(CLAIM_INDICATORS) + r")\b", re.IGNORECASE)
_CAPITALIZED_PHRASE = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*")
_QUOTED = re.compile(r"[\"'`]([^\"'`]{2,60})[\"'`]")
_MARKDOWN_NOISE = re.compile(r"\*\*|__|`")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]*\)")


def clean_markdown(text: str) -> str:
    """Strip emphasis, inline code markers and link targets."""
    text = _LINK.sub(r"\1", text)
    return _MARKDOWN_NOISE.sub("", text).strip()


def extract_keywords(text: str) -> list[str]:
    """
    Significant words of a text, longest first.

    Lowercases, drops punctuation, keeps words longer than three characters
    that are not stopwords, deduplicates and sorts by length descending
    (stable, so equal-length words keep their order of appearance).
    """
    words = re.sub(r"[^a-z0-9\s]", " ", text.lower()).split()
    seen: dict[str, None] = {}
    for word in words:
        if len(word) > 3 and word not in STOPWORDS:
            seen.setdefault(word, None)
    return sorted(seen, key=len, reverse=True)


def is_feature_claim(text: str) -> bool:
    """Heuristic: does this line read like a feature claim?"""
    stripped = text.strip()
    if not stripped:
        return False
    if _DATE_LINE.match(stripped) or _VERSION_LINE.match(stripped):
        return False
    if _NOTE_OR_TODO.search(stripped):
        return False
    return _INDICATOR.search(stripped) is not None


def extract_related_features(text: str) -> list[str]:
    """
    Named features a claim mentions: capitalized phrases and quoted spans.

    A lone capitalized word at the start of the sentence is just sentence
    case and is skipped.
    """
    found: dict[str, None] = {}
    for match in _CAPITALIZED_PHRASE.finditer(text):
        phrase = match.group(0)
        if match.start() == 0 and " " not in phrase:
            continue
        found.setdefault(phrase, None)
    for match in _QUOTED.finditer(text):
        found.setdefault(match.group(1).strip(), None)
    return list(found)


def normalize_identifier(name: str) -> str:
    """Lowercase and drop separators so `user_auth`, `UserAuth` and `user-auth` compare equal."""
    return re.sub(r"[^a-z0-9]", "", name.lower())
