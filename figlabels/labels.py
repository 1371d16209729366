"""Reference-label recognition: figure references, part numbers and word normalisation."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Mapping

FIG_PATTERN = re.compile(
    r"\b(FIG\.?|FIGURE\.?|FIG|FIGURE)\s*([0-9]+)\s*([A-Za-z])?\b", re.IGNORECASE
)

_DOUBLE_ES_ENDINGS = ("xes", "ches", "shes", "sses")


@dataclass(frozen=True)
class LabelOptions:
    """Which shapes of label number are accepted."""

    allow_2: bool = True
    allow_3: bool = True
    allow_4: bool = True
    allow_letters: bool = True
    allow_hyphen: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LabelOptions":
        """Build options from a mapping that must give every flag as a boolean."""
        if not isinstance(data, Mapping):
            raise ValueError("label options must be an object")
        values = {}
        for field in fields(cls):
            if field.name not in data:
                raise ValueError(f"missing field `{field.name}`")
            value = data[field.name]
            if not isinstance(value, bool):
                raise ValueError(f"field `{field.name}` must be a boolean")
            values[field.name] = value
        return cls(**values)

    def as_args(self) -> tuple[bool, bool, bool, bool, bool]:
        """The flags in the order the label functions take them."""
        return (self.allow_2, self.allow_3, self.allow_4, self.allow_letters, self.allow_hyphen)


def _byte_len(word: str) -> int:
    return len(word.encode("utf-8"))


def _singular(word: str) -> str:
    size = _byte_len(word)
    if size < 3:
        return word
    if word.endswith("ies") and size > 3:
        return word[:-3] + "y"
    if word.endswith("es") and size > 3:
        if word.endswith(_DOUBLE_ES_ENDINGS):
            return word[:-2]
        return word[:-1]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def normalize_text(text: str) -> str:
    """Lower-case text, reduce plural words to singular and restore 'FIG' spelling."""
    result = " ".join(_singular(word) for word in text.lower().split())
    return (
        result.replace("fig.", "FIG.")
        .replace("fig ", "FIG ")
        .replace("fig\n", "FIG\n")
    )


def build_label_regex(
    allow_2: bool, allow_3: bool, allow_4: bool, allow_letters: bool, allow_hyphen: bool
) -> re.Pattern[str]:
    """Compile a pattern that finds label numbers of the allowed shapes anywhere in a string."""
    patterns: list[str] = []
    if allow_2:
        patterns.append(r"\d{2}")
        if allow_letters:
            patterns.append(r"\d{2}[a-zA-Z]")
    if allow_3:
        patterns.append(r"\d{3}")
        if allow_letters:
            patterns.append(r"\d{3}[a-zA-Z]")
        if allow_hyphen:
            patterns.append(r"\d{3}-\d")
    if allow_4:
        patterns.append(r"\d{4}")
        if allow_letters:
            patterns.append(r"\d{4}[a-zA-Z]")
        if allow_hyphen:
            patterns.append(r"\d{4}-\d")
    return re.compile("(" + "|".join(patterns) + ")")


def clean_token(raw: str) -> str:
    """Keep only alphanumeric characters and hyphens."""
    return "".join(c for c in raw if c.isalnum() or c == "-")


def split_merged_label(token: str, label_regex: re.Pattern[str]) -> list[str]:
    """Split a token into two labels at the first point where both halves match."""
    token = clean_token(token)
    for i in range(2, len(token) - 1):
        left, right = token[:i], token[i:]
        if label_regex.search(left) and label_regex.search(right):
            return [left, right]
    return []


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def normalize_number(
    num: str, allow_2: bool, allow_3: bool, allow_4: bool, allow_letters: bool, allow_hyphen: bool
) -> str:
    """Reduce a raw number token to the space-joined label numbers it holds."""
    label_regex = build_label_regex(allow_2, allow_3, allow_4, allow_letters, allow_hyphen)

    fig = FIG_PATTERN.search(num)
    if fig and label_regex.search(fig.group(2)):
        return f"FIG. {fig.group(2)}"

    results: list[str] = []
    for raw_token in num.split():
        cleaned = clean_token(raw_token)
        if not cleaned:
            continue
        if label_regex.search(cleaned):
            results.append(cleaned)
        else:
            results.extend(split_merged_label(cleaned, label_regex))
    return " ".join(_dedupe(results))