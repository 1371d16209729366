"""HTTP front end: page templates, static files and DOCX label extraction."""

from __future__ import annotations

import argparse
import hashlib
import html
import json
import logging
import os
from pathlib import Path

from flask import Flask, Response, jsonify, request

from .docx import extract_matches, read_paragraph_texts
from .labels import LabelOptions

log = logging.getLogger(__name__)

DEFAULT_PORT = 8080
MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class _RequestError(Exception):
    """A request that cannot be served; the message is the response body."""


def file_hash(data: bytes) -> str:
    """Hex SHA-256 digest of uploaded data."""
    return hashlib.sha256(data).hexdigest()


def docx_html(paragraphs) -> str:
    """Render paragraph texts as escaped HTML paragraphs inside a content div."""
    body = "".join(f"<p>{html.escape(p, quote=False)}</p>" for p in paragraphs)
    return f"<div class='docx-content'>{body}</div>"


def _read_template(template_dir: Path, name: str) -> Response:
    try:
        content = (template_dir / name).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.debug("error reading %s: %s", name, exc)
        content = f"Error reading {name}: {exc}"
    return Response(content, mimetype="text/html")


def _plain(message: str) -> Response:
    return Response(message, mimetype="text/plain")


def _label_options_text() -> str | None:
    if "label_options" in request.form:
        return request.form["label_options"]
    upload = request.files.get("label_options")
    if upload is None:
        return None
    try:
        return upload.read().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise _RequestError(f"Failed to read label options: {exc}") from exc


def _docx_response() -> Response:
    upload = request.files.get("docx")
    options_text = _label_options_text()
    options = None
    if options_text is not None:
        try:
            options = LabelOptions.from_mapping(json.loads(options_text))
        except ValueError as exc:
            raise _RequestError(f"Failed to parse label options: {exc}") from exc

    if upload is None:
        raise _RequestError("No DOCX file provided")
    if options is None:
        raise _RequestError("No label options provided")

    data = upload.read()
    digest = file_hash(data)
    try:
        result = extract_matches(read_paragraph_texts(data), *options.as_args())
    except ValueError as exc:
        log.debug("DOCX processing error: %s", exc)
        raise _RequestError(f"Failed to process DOCX: {exc}") from exc

    return jsonify(
        matches=result.full_matches,
        numbers=result.numbers,
        html_content=docx_html(result.paragraphs),
        file_hash=digest,
    )


def create_app(template_dir: str | Path = "templates", static_dir: str | Path = "static") -> Flask:
    """Build the web application serving templates, static files and DOCX processing."""
    template_dir = Path(template_dir)
    app = Flask(
        __name__,
        static_folder=str(Path(static_dir).resolve()),
        static_url_path="/static",
    )
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES

    @app.get("/")
    def index() -> Response:
        if template_dir.is_dir():
            for entry in sorted(template_dir.iterdir()):
                log.debug("template entry: %s", entry)
        else:
            log.debug("could not read template directory %s", template_dir)
        return _read_template(template_dir, "index.html")

    @app.get("/comparison")
    def comparison() -> Response:
        return _read_template(template_dir, "comparison.html")

    @app.post("/process-docx")
    def process_docx() -> Response:
        try:
            return _docx_response()
        except _RequestError as exc:
            return _plain(str(exc))

    return app


def main(argv=None) -> None:
    """Run the web server on the port named by PORT, 8080 by default."""
    parser = argparse.ArgumentParser(prog="figlabels-web", description=main.__doc__)
    parser.parse_args(argv)
    port_text = os.environ.get("PORT", str(DEFAULT_PORT))
    try:
        port = int(port_text)
    except ValueError as exc:
        raise SystemExit(f"invalid PORT value: {port_text!r}") from exc
    if not 0 <= port <= 65535:
        raise SystemExit(f"invalid PORT value: {port_text!r}")
    app = create_app("templates", "static")
    print(f"Server running on port {port}")
    app.run(host="0.0.0.0", port=port)