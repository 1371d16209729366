# figlabels

Tools for checking that the reference numerals used in a written
description match the labels drawn on its figures.

The package works on two sides:

* **Text**: a DOCX description is read paragraph by paragraph. Every
  "word NUMBER" pair (for example `housing 12`, `lever 104a`) and every
  figure reference (`FIG. 3`, `Figure 2B`) is collected, de-duplicated and
  sorted.
* **Drawings**: helpers turn grey page samples into black-and-white
  images, boost contrast, turn recognised text lines into bounding boxes
  relative to the page size, and draw those boxes back onto the page for
  review.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Label rules

Which tokens count as labels is controlled by five switches, also carried
by `figlabels.labels.LabelOptions` (all `True` by default):

| switch          | allows                        |
|-----------------|-------------------------------|
| `allow_2`       | two-digit numbers (`12`)      |
| `allow_3`       | three-digit numbers (`104`)   |
| `allow_4`       | four-digit numbers (`1002`)   |
| `allow_letters` | a trailing letter (`104a`)    |
| `allow_hyphen`  | a hyphenated suffix (`104-1`) |

```python
from figlabels.labels import normalize_number, normalize_text

normalize_number("FIG. 12", True, True, True, True, True)   # "FIG. 12"
normalize_number("104a,", True, True, True, True, True)     # "104a"
normalize_text("Surfaces")                                  # "surface"
```

`build_label_regex` compiles the pattern for a set of switches,
`clean_token` strips everything but letters, digits and hyphens, and
`split_merged_label` splits a token such as `1214` into two labels when
both halves match.

`LabelOptions.from_mapping` builds the options from a dictionary such as
the JSON sent by the web form; every one of the five keys must be present
and hold a boolean, otherwise `ValueError` is raised. `as_args()` returns
the switches in the order the label functions take them.

## Reading a DOCX file

```python
from figlabels.docx import process_docx

result = process_docx("description.docx", True, True, True, True, True)
result.full_matches   # e.g. ["FIG. 1", "housing 12", "lever 14"]
result.numbers        # the normalised numbers, sorted numerically
result.paragraphs     # the non-empty paragraphs of the document
```

`read_paragraph_texts` (from the bytes of a DOCX file) and
`extract_matches` (from any iterable of paragraph strings) expose the two
steps separately, so text from any source can be checked without a file.
Data that is not a readable DOCX document raises `figlabels.docx.DocxError`,
a subclass of `ValueError`.

Words such as "to", "the", "of" or "about" before a number are ignored.
After "and" or "or", the number is attributed to the previous noun, so
"lever 12 and 14" yields `lever 12` and `lever 14`.

## Drawing pages

`figlabels.pages` holds the image side:

* `binarize(samples, width, height)` thresholds row-major grey samples into
  a black-and-white RGB image.
* `enhance_contrast(image)` scales every channel by 1.2, saturating at 255.
* `bounding_box(corners, width, height)` and `build_results(lines, width,
  height)` produce `OcrResult` records (`text`, `bbox` as `x1, y1, x2, y2`
  relative to the page size; `to_dict()` gives a JSON-ready mapping).
  `build_results` takes pairs of word boxes and recognised line text.
* `draw_boxes(image, results)` returns a copy of the image with each box
  outlined in red.
* `page_output_name(index)` gives the file name for a page at a zero-based
  index, e.g. `output_page_1.png`.

## Web interface

```
figlabels-web
```

starts the web application. It serves `templates/index.html` at `/`,
`templates/comparison.html` at `/comparison` and files from `static/`
under `/static`, all relative to the working directory. A DOCX upload
posted to `/process-docx` (form fields `docx` and `label_options`, the
latter a JSON object with the five switches) returns JSON with `matches`,
`numbers`, `html_content` (the document's paragraphs as escaped HTML) and
`file_hash` (the SHA-256 hash of the upload). When a field is missing or
the document cannot be read, the response body is a plain-text message
saying so. Uploads are limited to 50 MB. The server listens on all
interfaces on the port given by the `PORT` environment variable, 8080 by
default.

The application can also be built in code with
`figlabels.web.create_app(template_dir, static_dir)`.

## What this package does not do

It does not open or render PDF files and it does not perform text
recognition itself. The drawing helpers work on grey samples and on
recognised text and boxes supplied by the caller, and the web interface
accepts DOCX uploads only.