"""Extraction of labelled part numbers and figure references from DOCX documents."""

from __future__ import annotations

import io
import logging
import re
import zipfile
from dataclasses import dataclass, field
from functools import cmp_to_key
from pathlib import Path
from typing import Iterable
from xml.etree.ElementTree import ParseError

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from .labels import FIG_PATTERN, normalize_number, normalize_text

log = logging.getLogger(__name__)

_W = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
_WORD_PATTERN = re.compile(r"\b(\w+)\s+([^\s]*[0-9][^\s]*)\b")
_SKIPPED_WORDS = frozenset({"to", "than", "as", "the", "about", "of", "fig", "figure"})
_CONJUNCTIONS = frozenset({"and", "or"})
_I32_MAX = 2**31 - 1


class DocxError(ValueError):
    """The data is not a readable DOCX document."""


@dataclass
class DocxResult:
    """Matches found in a document, the label numbers and the paragraph texts."""

    full_matches: list[str] = field(default_factory=list)
    numbers: list[str] = field(default_factory=list)
    paragraphs: list[str] = field(default_factory=list)


def read_paragraph_texts(data: bytes) -> list[str]:
    """Return the text of each body paragraph, its runs joined by single spaces."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            xml = archive.read("word/document.xml")
        root = fromstring(xml)
    except (zipfile.BadZipFile, KeyError, ParseError, DefusedXmlException) as exc:
        raise DocxError(f"Failed to parse DOCX file: {exc}") from exc

    body = root.find(f"{_W}body")
    if body is None:
        raise DocxError("Failed to parse DOCX file: document has no body")

    texts = []
    for paragraph in body.iterfind(f"{_W}p"):
        runs = (
            "".join(t.text or "" for t in run.iterfind(f"{_W}t"))
            for run in paragraph.iterfind(f"{_W}r")
        )
        texts.append(" ".join(runs))
    return texts


def _is(word: str, choices: frozenset[str]) -> bool:
    return word.isascii() and word.lower() in choices


def _leading_i32(text: str) -> int | None:
    digits = re.match(r"[0-9]*", text).group(0)
    if not digits:
        return None
    value = int(digits)
    return value if value <= _I32_MAX else None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _first_word(text: str) -> str:
    parts = text.split()
    return parts[0].lower() if parts else ""


def _pattern_word(text: str) -> str:
    match = _WORD_PATTERN.search(text)
    return match.group(1) if match else ""


def _compare_matches(a: str, b: str) -> int:
    order = _cmp(_first_word(a), _first_word(b))
    if order:
        return order
    a_word, b_word = _pattern_word(a), _pattern_word(b)
    a_val, b_val = _leading_i32(a_word), _leading_i32(b_word)
    if a_val is not None and b_val is not None:
        return _cmp(a_val, b_val)
    return _cmp(a_word, b_word)


def _compare_numbers(a: str, b: str) -> int:
    a_val, b_val = _leading_i32(a), _leading_i32(b)
    if a_val is not None and b_val is not None:
        return _cmp(a_val, b_val)
    return _cmp(a, b)


def extract_matches(
    paragraph_texts: Iterable[str],
    allow_2: bool = True,
    allow_3: bool = True,
    allow_4: bool = True,
    allow_letters: bool = True,
    allow_hyphen: bool = True,
) -> DocxResult:
    """Find 'word NUMBER' pairs and figure references in paragraph texts."""
    paragraph_texts = list(paragraph_texts)
    text = "".join(f"{para}\n\n" for para in paragraph_texts)
    paragraphs = [para.strip() for para in paragraph_texts if para.strip()]

    seen_keys: set[str] = set()
    numbers: set[str] = set()
    full_matches: list[str] = []

    for line in text.split("\n"):
        for cap in FIG_PATTERN.finditer(line):
            fig_text = f"FIG. {cap.group(2).strip()}{(cap.group(3) or '').strip()}"
            if fig_text not in seen_keys:
                log.debug("adding figure reference %s", fig_text)
                seen_keys.add(fig_text)
                full_matches.append(fig_text)
                numbers.add(fig_text)

    last_noun = ""
    last_noun_normalized = ""
    for cap in _WORD_PATTERN.finditer(text):
        original_word = cap.group(1).strip()
        raw_number = cap.group(2).strip()
        if not re.search(r"[0-9]", raw_number):
            continue

        normalized_word = normalize_text(original_word)
        if _is(normalized_word, _SKIPPED_WORDS):
            continue

        normalized = normalize_number(
            raw_number, allow_2, allow_3, allow_4, allow_letters, allow_hyphen
        )
        if not normalized:
            continue

        is_conjunction = _is(normalized_word, _CONJUNCTIONS)
        if is_conjunction and last_noun:
            display_word, key_word = last_noun, last_noun_normalized
        else:
            display_word, key_word = original_word, normalized_word

        if not is_conjunction:
            last_noun, last_noun_normalized = original_word, normalized_word

        key = f"{key_word} {normalized}"
        if key not in seen_keys:
            seen_keys.add(key)
            full_matches.append(f"{display_word} {raw_number}")
            numbers.add(normalized)

    full_matches.sort(key=cmp_to_key(_compare_matches))
    numbers_sorted = sorted(sorted(numbers), key=cmp_to_key(_compare_numbers))
    log.debug("full matches: %s; numbers: %s", full_matches, numbers_sorted)

    return DocxResult(full_matches=full_matches, numbers=numbers_sorted, paragraphs=paragraphs)


def process_docx(
    docx_path: str | Path,
    allow_2: bool = True,
    allow_3: bool = True,
    allow_4: bool = True,
    allow_letters: bool = True,
    allow_hyphen: bool = True,
) -> DocxResult:
    """Read a DOCX file and extract its label matches."""
    data = Path(docx_path).read_bytes()
    return extract_matches(
        read_paragraph_texts(data), allow_2, allow_3, allow_4, allow_letters, allow_hyphen
    )