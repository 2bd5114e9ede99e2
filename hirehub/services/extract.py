"""Turn an uploaded resume or materials file into plain text.

Dispatch is on the stored file's mime type first, then on its name. Archives
are unpacked and only the members that look like candidate materials are
converted, each preceded by a banner line naming the member. Every temporary
file lives inside one ``TemporaryDirectory`` per call so nothing outlives the
extraction, whether it succeeds or fails.
"""

import io
import os
import subprocess
import tarfile
import tempfile
import zipfile

import docx
import html2text
from flask import current_app
from striprtf.striprtf import rtf_to_text

from ..errors import ConversionError, ExtractError, FetchError
from . import storage as default_storage
from .storage import NATIVE_DOCUMENT_MIME, normalize_ref

BANNER = "====================== {kind} file: {path} ======================\n\n"
IMAGE_SUFFIXES = ('.jpg', '.jpeg', '.png', '.gif')


def is_materials(file_name, suffixes=None, markers=None):
    """Whether an archive member is a candidate-materials document."""
    if suffixes is None:
        suffixes = current_app.config.get('MATERIALS_FILE_SUFFIXES') or []
    if markers is None:
        markers = current_app.config.get('MATERIALS_FILE_MARKERS') or []
    if any(file_name.endswith(s) for s in suffixes):
        return True
    if file_name.endswith('.pdf') and any(m in file_name for m in markers):
        return True
    return False


def _run(cmd, cwd=None):
    timeout = current_app.config.get('EXTRACT_TIMEOUT_SEC', 120)
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False, cwd=cwd)
    except FileNotFoundError as e:
        raise ConversionError(f"{cmd[0]} is not installed") from e
    except subprocess.TimeoutExpired as e:
        raise ConversionError(f"{cmd[0]} timed out after {timeout}s") from e
    if proc.returncode != 0:
        raise ConversionError(f"{cmd[0]} exited with {proc.returncode}", proc.stdout, proc.stderr)
    return proc


def pdf_to_text(path):
    out = path + '.txt'
    proc = _run(['pdftotext', '-enc', 'UTF-8', path, out])
    if not os.path.exists(out):
        current_app.logger.warning('pdftotext produced no output for %s: stdout=%r stderr=%r',
                                   os.path.basename(path), proc.stdout, proc.stderr)
        return ''
    with open(out, encoding='utf-8', errors='replace') as f:
        return f.read()


def html_to_text(html):
    h = html2text.HTML2Text()
    h.body_width = 80
    return h.handle(html)


def docx_to_text(data: bytes):
    document = docx.Document(io.BytesIO(data))
    return '\n'.join(p.text for p in document.paragraphs)


def _fetch(storage, ref):
    try:
        return storage.download_bytes(ref)
    except ExtractError:
        raise
    except Exception as e:
        raise FetchError(f"{ref}: {e}") from e


def _write(tmp, name, data):
    path = os.path.join(tmp, os.path.basename(name) or 'download')
    with open(path, 'wb') as f:
        f.write(data)
    return path


def _read_member(path):
    if path.lower().endswith('.pdf'):
        return pdf_to_text(path)
    with open(path, encoding='utf-8', errors='replace') as f:
        return f.read()


def _collect_materials(root, kind):
    parts = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for fn in sorted(filenames):
            if not is_materials(fn):
                continue
            path = os.path.join(dirpath, fn)
            rel = os.path.relpath(path, root)
            parts.append(BANNER.format(kind=kind, path=rel))
            parts.append(_read_member(path))
            parts.append("\n\n\n")
    return ''.join(parts)


def _unpack(archive_path, kind, out_dir):
    try:
        if kind == '7z':
            _run(['7z', 'x', f'-o{out_dir}', archive_path])
        elif kind == 'tarball':
            with tarfile.open(archive_path) as tf:
                tf.extractall(out_dir, filter='data')
        elif kind == 'zip':
            with zipfile.ZipFile(archive_path) as zf:
                zf.extractall(out_dir)
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise ConversionError(f"could not unpack {os.path.basename(archive_path)}: {e}") from e


def _archive_kind(lower_name):
    if lower_name.endswith('.7z'):
        return '7z'
    if lower_name.endswith(('.tgz', '.tar.gz', '.tar')):
        return 'tarball'
    if lower_name.endswith('.zip'):
        return 'zip'
    return None


def extract(file_ref, storage=None):
    """Return the plain text of the file at ``file_ref``.

    Raises ``FetchError`` when the file cannot be read from storage and
    ``ConversionError`` when a converter fails. Presentations and images are
    not supported and yield an empty string.
    """
    storage = storage or default_storage
    ref = normalize_ref(file_ref)
    log = current_app.logger

    try:
        meta = storage.get_metadata(ref)
    except ExtractError:
        raise
    except Exception as e:
        raise FetchError(f"{ref}: {e}") from e

    name = meta.name or ''
    lower = name.lower()
    mime = meta.mime_type or ''

    with tempfile.TemporaryDirectory(prefix='hirehub-extract-') as tmp:
        if mime == 'application/pdf':
            text = pdf_to_text(_write(tmp, name or 'file.pdf', _fetch(storage, ref)))
        elif mime == 'text/html':
            text = html_to_text(_fetch(storage, ref).decode('utf-8', errors='replace'))
        elif mime == NATIVE_DOCUMENT_MIME:
            text = storage.export_text(ref)
        elif _archive_kind(lower):
            kind = _archive_kind(lower)
            archive_path = _write(tmp, name, _fetch(storage, ref))
            out_dir = os.path.join(tmp, 'unpacked')
            os.makedirs(out_dir)
            _unpack(archive_path, kind, out_dir)
            text = _collect_materials(out_dir, kind)
        elif lower.endswith('.pptx') or lower.endswith(IMAGE_SUFFIXES) or mime.startswith('image/'):
            log.warning('cannot extract text from %s (%s), skipping', name, mime)
            text = ''
        elif lower.endswith('.rtf'):
            text = rtf_to_text(_fetch(storage, ref).decode('utf-8', errors='replace'))
        elif lower.endswith('.doc'):
            path = _write(tmp, name, _fetch(storage, ref))
            text = _run(['catdoc', path]).stdout
        elif lower.endswith('.docx'):
            text = docx_to_text(_fetch(storage, ref))
        else:
            path = _write(tmp, name, _fetch(storage, ref))
            out = os.path.join(tmp, 'converted.txt')
            _run(['pandoc', '-t', 'plain', '-o', out, path])
            with open(out, encoding='utf-8', errors='replace') as f:
                text = f.read()

    return text.strip()
