import io
import json
import zipfile

import pytest

from figlabels.docx import extract_matches
from figlabels.web import create_app, docx_html, file_hash

ALL_OPTIONS = {
    "allow_2": True,
    "allow_3": True,
    "allow_4": True,
    "allow_letters": True,
    "allow_hyphen": True,
}

_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def make_docx(paragraphs):
    body = "".join(
        f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>" for text in paragraphs
    )
    xml = (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<w:document xmlns:w="{_NS}"><w:body>{body}</w:body></w:document>'
    )
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("word/document.xml", xml)
    return buffer.getvalue()


@pytest.fixture
def dirs(tmp_path):
    templates = tmp_path / "templates"
    static = tmp_path / "static"
    templates.mkdir()
    static.mkdir()
    return templates, static


@pytest.fixture
def client(dirs):
    templates, static = dirs
    app = create_app(templates, static)
    app.config["TESTING"] = True
    return app.test_client()


def post_docx(client, data=None, options=ALL_OPTIONS):
    form = {}
    if data is not None:
        form["docx"] = (io.BytesIO(data), "doc.docx")
    if options is not None:
        form["label_options"] = options if isinstance(options, str) else json.dumps(options)
    return client.post("/process-docx", data=form, content_type="multipart/form-data")


def test_file_hash_of_empty_data():
    assert file_hash(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_file_hash_differs_for_different_data():
    assert file_hash(b"a") != file_hash(b"b")
    assert len(file_hash(b"abc")) == 64


def test_docx_html_escapes_text():
    assert docx_html(["a < b & c"]) == "<div class='docx-content'><p>a &lt; b &amp; c</p></div>"


def test_docx_html_empty():
    assert docx_html([]) == "<div class='docx-content'></div>"


def test_index_serves_template(client, dirs):
    templates, _ = dirs
    (templates / "index.html").write_text("<h1>hello</h1>", encoding="utf-8")
    response = client.get("/")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "<h1>hello</h1>"
    assert response.mimetype == "text/html"


def test_index_missing_reports_error(client):
    response = client.get("/")
    assert response.get_data(as_text=True).startswith("Error reading index.html: ")


def test_comparison_serves_template(client, dirs):
    templates, _ = dirs
    (templates / "comparison.html").write_text("compare", encoding="utf-8")
    assert client.get("/comparison").get_data(as_text=True) == "compare"


def test_comparison_missing_reports_error(client):
    body = client.get("/comparison").get_data(as_text=True)
    assert body.startswith("Error reading comparison.html: ")


def test_static_files_served(client, dirs):
    _, static = dirs
    (static / "app.js").write_text("let x = 1;", encoding="utf-8")
    response = client.get("/static/app.js")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "let x = 1;"


def test_process_docx_simple(client):
    data = make_docx(["housing 12"])
    payload = post_docx(client, data).get_json()
    assert payload["matches"] == ["housing 12"]
    assert payload["numbers"] == ["12"]
    assert payload["file_hash"] == file_hash(data)
    assert payload["html_content"] == docx_html(["housing 12"])


def test_process_docx_agrees_with_extraction(client):
    paragraphs = ["The housing 12 and 14 are shown in FIG. 3A", "", "A lever 205-1 moves."]
    payload = post_docx(client, make_docx(paragraphs)).get_json()
    expected = extract_matches(paragraphs)
    assert payload["matches"] == expected.full_matches
    assert payload["numbers"] == expected.numbers
    assert payload["html_content"] == docx_html(expected.paragraphs)


def test_process_docx_respects_options(client):
    options = dict(ALL_OPTIONS, allow_2=False)
    payload = post_docx(client, make_docx(["housing 12"]), options).get_json()
    assert payload["matches"] == []
    assert payload["numbers"] == []


def test_process_docx_without_file(client):
    assert post_docx(client).get_data(as_text=True) == "No DOCX file provided"


def test_process_docx_without_options(client):
    response = post_docx(client, make_docx(["housing 12"]), options=None)
    assert response.get_data(as_text=True) == "No label options provided"


def test_process_docx_bad_options_json(client):
    response = post_docx(client, make_docx(["housing 12"]), options="{not json")
    assert response.get_data(as_text=True).startswith("Failed to parse label options: ")


def test_process_docx_incomplete_options(client):
    response = post_docx(client, make_docx(["housing 12"]), options={"allow_2": True})
    assert response.get_data(as_text=True).startswith("Failed to parse label options: ")


def test_process_docx_invalid_document(client):
    response = post_docx(client, b"not a zip archive")
    assert response.get_data(as_text=True).startswith("Failed to process DOCX: ")