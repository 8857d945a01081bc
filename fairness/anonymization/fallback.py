"""Deterministic, pattern-based anonymizer used when the remote capability is down.

Processing flow:
1. Replace "Firstname Lastname" pairs with "the candidate".
2. Replace gendered pronouns with "they" / "their".
3. Remove age descriptors.
4. Remove simple "from/in/at City[, City]" location phrases.
5. Normalize whitespace left behind by the removals.

The steps repeat until the text stops changing: a removal can join two
capitalized words into a new name pair ("Alice young Bob" -> "Alice Bob").

The rules are regex-only and intentionally conservative: they trade
completeness for determinism and availability.
"""

from __future__ import annotations

import re
from typing import ClassVar


class PatternAnonymizer:
    """Regex anonymizer with no external dependencies."""

    _NAME_RE: ClassVar[re.Pattern[str]] = re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b")
    _PRONOUN_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:he|him|his|she|her|hers)\b",
        re.IGNORECASE,
    )
    _AGE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:young|old|senior|junior|experienced|newbie|veteran)\b",
        re.IGNORECASE,
    )
    _LOCATION_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:from|in|at) [A-Z][a-z]+(?:, [A-Z][a-z]+)?\b",
    )
    _SPACE_RUN_RE: ClassVar[re.Pattern[str]] = re.compile(r"[ \t]{2,}")
    _SPACE_BEFORE_PUNCT_RE: ClassVar[re.Pattern[str]] = re.compile(r"[ \t]+([,.;:!?])")

    NAME_REPLACEMENT: ClassVar[str] = "the candidate"
    PRONOUN_REPLACEMENTS: ClassVar[dict[str, str]] = {
        "he": "they",
        "him": "they",
        "she": "they",
        "his": "their",
        "her": "their",
        "hers": "their",
    }

    def anonymize(self, text: str) -> str:
        """Return *text* with names, pronouns, age and location terms replaced."""
        if not text or not text.strip():
            return text

        result = text
        while True:
            rewritten = self._rewrite(result)
            if rewritten == result:
                return rewritten
            result = rewritten

    def _rewrite(self, text: str) -> str:
        result = self._NAME_RE.sub(self.NAME_REPLACEMENT, text)
        result = self._PRONOUN_RE.sub(self._replace_pronoun, result)
        result = self._AGE_RE.sub("", result)
        result = self._LOCATION_RE.sub("", result)
        return self._normalize_whitespace(result)

    def _replace_pronoun(self, match: re.Match[str]) -> str:
        word = match.group(0)
        replacement = self.PRONOUN_REPLACEMENTS[word.lower()]
        if len(word) > 1 and word.isupper():
            return replacement.upper()
        if word[0].isupper():
            return replacement.capitalize()
        return replacement

    def _normalize_whitespace(self, text: str) -> str:
        text = self._SPACE_RUN_RE.sub(" ", text)
        text = self._SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
        return text.strip()
