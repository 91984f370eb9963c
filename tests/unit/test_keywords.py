# tests/unit/test_keywords.py
"""Unit tests for keyword extraction and claim heuristics."""

import pytest

from gap_roadmap.analysis.feature_gaps import FeatureGapAnalyzer
from gap_roadmap.analysis.keywords import (
    clean_markdown,
    extract_keywords,
    extract_related_features,
    is_feature_claim,
    normalize_identifier,
)


class TestExtractKeywords:
    def test_longest_first(self):
        """Significant words sorted by length, ties in order of appearance."""
        assert extract_keywords("Automatically generates comprehensive test reports") == [
            "automatically", "comprehensive", "generates", "reports", "test",
        ]

    def test_drops_short_words_and_stopwords(self):
        assert extract_keywords("The API must have a fast cache") == ["cache", "fast"]

    def test_deduplicates(self):
        assert extract_keywords("Cache cache CACHE!") == ["cache"]

    def test_empty(self):
        assert extract_keywords("") == []


class TestIsFeatureClaim:
    @pytest.mark.parametrize("text", [
        "Supports OAuth login",
        "Automatically generates comprehensive test reports",
        "Users can export data",
    ])
    def test_claims(self, text):
        assert is_feature_claim(text)

    @pytest.mark.parametrize("text", [
        "",
        "2024-01-01 supports everything",
        "v1.2 provides caching",
        "TODO: supports retries",
        "Note: generates reports later",
        "Installation instructions",
    ])
    def test_not_claims(self, text):
        assert not is_feature_claim(text)


class TestRelatedFeatures:
    def test_capitalized_phrases_and_quotes(self):
        """Capitalized phrases and quoted spans are named features."""
        text = "Generates reports with the Report Builder and `pdf_export` helper"
        assert extract_related_features(text) == ["Report Builder", "pdf_export"]

    def test_sentence_case_word_skipped(self):
        assert extract_related_features("Supports retries") == []


class TestHelpers:
    def test_clean_markdown(self):
        assert clean_markdown("**Fast** `cache` via [docs](http://x)") == "Fast cache via docs"

    def test_normalize_identifier(self):
        assert normalize_identifier("User_Auth") == normalize_identifier("user-auth") == "userauth"


class TestParseClaims:
    """Claim extraction from Markdown documents."""

    CONTENT = "\n".join([
        "# Features",
        "",
        "- Supports OAuth login for all users",
        "- Plain bullet without indicator words",
        "Some text with **Automatically generates comprehensive test reports** inline.",
        "```python",
        "- supports a fake claim inside code",
        "```",
        "## Notes",
        "- TODO: supports later",
        "- Supports OAuth login for all users",
    ])

    def test_bullets_and_bold_spans(self):
        claims = FeatureGapAnalyzer.parse_claims(self.CONTENT)
        assert [c.claim for c in claims] == [
            "Supports OAuth login for all users",
            "Automatically generates comprehensive test reports",
        ]

    def test_lines_and_sections(self):
        claims = FeatureGapAnalyzer.parse_claims(self.CONTENT)
        assert [(c.line, c.section) for c in claims] == [(3, "Features"), (5, "Features")]

    def test_short_bold_ignored(self):
        """Bold spans of 20 characters or fewer are emphasis, not claims."""
        assert FeatureGapAnalyzer.parse_claims("Text **supports x** here") == []
