import io
import os
import subprocess
import sys
import tarfile
import tempfile
import zipfile

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hirehub.errors import ConversionError, FetchError
from hirehub.services import extract as extract_mod
from hirehub.services.extract import extract, is_materials
from hirehub.services.storage import normalize_ref


def _zip(members):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w') as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return buf.getvalue()


def _tarball(members):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode='w:gz') as tf:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def scratch(tmp_path, monkeypatch):
    d = tmp_path / "scratch"
    d.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(d))
    return d


def test_html_is_wrapped_to_text(app, storage):
    storage.add("gdrive://r1", "resume.html", "text/html", b"<h1>Jane Doe</h1><p>Kernel engineer.</p>")
    text = extract("https://drive.google.com/open?id=r1", storage=storage)
    assert "# Jane Doe" in text
    assert "Kernel engineer." in text


def test_local_file_through_default_storage(app, tmp_path):
    path = tmp_path / "resume.html"
    path.write_text("<p>Hello from disk</p>")
    assert extract(f"file://{path}") == "Hello from disk"


def test_zip_members_get_banners(app, storage, scratch):
    data = _zip({
        "README.md": "read me first",
        "notes.txt": "private notes",
        "sub/questionnaire.md": "my answers",
    })
    storage.add("gdrive://m1", "materials.zip", "application/zip", data)

    text = extract("gdrive://m1", storage=storage)

    assert text.startswith("====================== zip file: README.md ======================\n\nread me first")
    assert "====================== zip file: sub/questionnaire.md ======================\n\nmy answers" in text
    assert "private notes" not in text
    assert os.listdir(scratch) == []


def test_tarball_members(app, storage):
    storage.add("gdrive://m2", "materials.tar.gz", "application/gzip",
                _tarball({"questionnaire.md": b"tar answers"}))
    text = extract("gdrive://m2", storage=storage)
    assert text == "====================== tarball file: questionnaire.md ======================\n\ntar answers"


def test_presentation_is_skipped_without_download(app, storage):
    storage.add("gdrive://p1", "talk.pptx",
                "application/vnd.openxmlformats-officedocument.presentationml.presentation", b"PK")
    assert extract("gdrive://p1", storage=storage) == ""
    assert storage.downloads == []


def test_native_document_is_exported(app, storage):
    storage.add("gdrive://d1", "Resume", "application/vnd.google-apps.document", b"Exported text\n")
    assert extract("gdrive://d1", storage=storage) == "Exported text"


def test_unreadable_file_is_fetch_error(app, storage):
    with pytest.raises(FetchError):
        extract("gdrive://missing", storage=storage)


def test_pdf_goes_through_pdftotext(app, storage, scratch, monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        with open(cmd[-1], 'w') as f:
            f.write("  pdf body\n")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(extract_mod.subprocess, "run", fake_run)
    storage.add("gdrive://r2", "resume.pdf", "application/pdf", b"%PDF-1.4")

    assert extract("gdrive://r2", storage=storage) == "pdf body"
    assert calls[0][:3] == ['pdftotext', '-enc', 'UTF-8']
    assert os.listdir(scratch) == []


def test_converter_failure_carries_output_and_cleans_up(app, storage, scratch, monkeypatch):
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, "", "Syntax Error: bad xref")

    monkeypatch.setattr(extract_mod.subprocess, "run", fake_run)
    storage.add("gdrive://r3", "resume.pdf", "application/pdf", b"not a pdf")

    with pytest.raises(ConversionError) as excinfo:
        extract("gdrive://r3", storage=storage)

    assert excinfo.value.stderr == "Syntax Error: bad xref"
    assert "bad xref" in str(excinfo.value)
    assert os.listdir(scratch) == []


def test_missing_converter_is_conversion_error(app, storage, monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(extract_mod.subprocess, "run", fake_run)
    storage.add("gdrive://r4", "resume.odt", "application/vnd.oasis.opendocument.text", b"odt")

    with pytest.raises(ConversionError, match="pandoc"):
        extract("gdrive://r4", storage=storage)


def test_is_materials(app):
    assert is_materials("responses.pdf")
    assert is_materials("Jane - Oxide Candidate Materials - v2.pdf")
    assert is_materials("Oxide_Candidate_Materials_final.pdf")
    assert not is_materials("resume.pdf")
    assert not is_materials("Oxide Candidate Materials.docx")


def test_normalize_drive_links():
    assert normalize_ref("https://drive.google.com/open?id=abc123") == "gdrive://abc123"
    assert normalize_ref("https://drive.google.com/file/d/abc123/view?usp=sharing") == "gdrive://abc123"
    assert normalize_ref("s3://bucket/key.pdf") == "s3://bucket/key.pdf"
