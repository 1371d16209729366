"""Page-level OCR post-processing: binarisation, contrast, word boxes and overlays."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from PIL import Image

from .labels import (
    FIG_PATTERN,
    build_label_regex,
    clean_token,
    normalize_text,
    split_merged_label,
)

log = logging.getLogger(__name__)

THRESHOLD = 160
CONTRAST_NUMERATOR = 6
CONTRAST_DENOMINATOR = 5
BOX_COLOUR = (255, 0, 0)

_STANDALONE_REF = re.compile(r"\b([0-9]+[A-Z])\b")

Point = Sequence[float]
Line = tuple[Sequence[Sequence[Point]], Optional[str]]


@dataclass(frozen=True)
class OcrResult:
    """Recognised line text and a word box in coordinates normalised to the page size."""

    text: str
    bbox: tuple[float, float, float, float]

    def to_dict(self) -> dict:
        """A JSON-ready mapping with the text and the [x1, y1, x2, y2] box."""
        return {"text": self.text, "bbox": list(self.bbox)}


def binarize(samples: bytes | Sequence[int], width: int, height: int) -> Image.Image:
    """Turn row-major grey samples into a black-and-white RGB image.

    Samples darker than the threshold become black, the rest white; pixels
    for which no sample is given stay black.
    """
    if width < 0 or height < 0:
        raise ValueError("image dimensions must not be negative")
    grey = bytes(
        0 if value < THRESHOLD else 255 for value in bytes(samples)[: width * height]
    )
    grey = grey.ljust(width * height, b"\x00")
    return Image.frombytes("L", (width, height), grey).convert("RGB")


def enhance_contrast(image: Image.Image) -> Image.Image:
    """Scale every channel by 1.2, saturating at 255, and return the new image."""
    table = [
        min(value * CONTRAST_NUMERATOR // CONTRAST_DENOMINATOR, 255) for value in range(256)
    ]
    return image.convert("RGB").point(table * 3)


def bounding_box(
    corners: Iterable[Point], width: int, height: int
) -> tuple[float, float, float, float]:
    """Axis-aligned box around the corners, divided by the page size."""
    points = [(float(x), float(y)) for x, y in corners]
    if not points:
        raise ValueError("a box needs at least one corner")
    xs = [x for x, _ in points]
    ys = [y for _, y in points]
    return (min(xs) / width, min(ys) / height, max(xs) / width, max(ys) / height)


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _line_labels(normalized_line: str) -> list[str]:
    """Figure references or label numbers found in a normalised line."""
    results: list[str] = []
    for cap in FIG_PATTERN.finditer(normalized_line):
        number = cap.group(2)
        if any("A" <= c <= "Z" for c in number.upper()):
            results.append(f"{cap.group(1)}{number}")
    if not results:
        results = [
            f"FIG.{cap.group(1).upper()}" for cap in _STANDALONE_REF.finditer(normalized_line)
        ]
    if not results:
        label_regex = build_label_regex(True, True, True, True, True)
        for raw_token in normalized_line.split():
            cleaned = clean_token(raw_token)
            if not cleaned:
                continue
            if label_regex.search(cleaned):
                results.append(cleaned)
            else:
                results.extend(split_merged_label(cleaned, label_regex))
    return _dedupe(results)


def build_results(lines: Iterable[Line], width: int, height: int) -> list[OcrResult]:
    """One result per word box of every recognised line, carrying the line's normalised text.

    Each line is a pair of its word boxes (each a sequence of corner points)
    and its recognised text, which is None where recognition failed.
    """
    results: list[OcrResult] = []
    for word_boxes, text in lines:
        if text is None:
            continue
        log.debug("raw OCR text: %s", text)
        normalized_line = normalize_text(text)
        for corners in word_boxes:
            bbox = bounding_box(corners, width, height)
            if any(c.isascii() and c.isdigit() for c in normalized_line):
                log.debug("page numbers found: %s", _line_labels(normalized_line))
            log.debug(
                "bounding box text: %r at [%.3f, %.3f, %.3f, %.3f]", text.strip(), *bbox
            )
            if normalized_line:
                results.append(OcrResult(text=normalized_line, bbox=bbox))
    return results


def _to_pixel(value: float, size: int) -> int:
    scaled = value * size
    if scaled != scaled or scaled <= 0:
        return 0
    return int(scaled)


def draw_boxes(image: Image.Image, results: Iterable[OcrResult]) -> Image.Image:
    """Return a copy of the image with a red rectangle outline for every result."""
    output = image.convert("RGB").copy()
    width, height = output.size
    pixels = output.load()
    for result in results:
        x1, y1, x2, y2 = result.bbox
        x1, x2 = _to_pixel(x1, width), _to_pixel(x2, width)
        y1, y2 = _to_pixel(y1, height), _to_pixel(y2, height)
        for x in range(x1, min(x2, width - 1) + 1):
            if y1 < height:
                pixels[x, y1] = BOX_COLOUR
            if y2 < height:
                pixels[x, y2] = BOX_COLOUR
        for y in range(y1, min(y2, height - 1) + 1):
            if x1 < width:
                pixels[x1, y] = BOX_COLOUR
            if x2 < width:
                pixels[x2, y] = BOX_COLOUR
    return output


def page_output_name(index: int) -> str:
    """File name for the annotated image of the page at a zero-based index."""
    return f"output_page_{index + 1}.png"