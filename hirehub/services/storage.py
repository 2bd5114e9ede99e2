import mimetypes
import os
from collections import namedtuple

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from ..errors import FetchError
from .http import build_session, call

FileMetadata = namedtuple("FileMetadata", ["name", "mime_type"])

DRIVE_API = "https://www.googleapis.com/drive/v3/files"
NATIVE_DOCUMENT_MIME = "application/vnd.google-apps.document"
_DRIVE_PREFIXES = (
    "https://drive.google.com/open?id=",
    "https://drive.google.com/file/d/",
)


def normalize_ref(url: str) -> str:
    """Turn a shared-drive link into a ``gdrive://<id>`` reference."""
    url = (url or "").strip()
    for prefix in _DRIVE_PREFIXES:
        if url.startswith(prefix):
            file_id = url[len(prefix):]
            file_id = file_id.split("/view")[0].split("&")[0].strip("/")
            return f"gdrive://{file_id}"
    return url


def _s3_client():
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    s3_config = Config(signature_version='s3v4', s3={'addressing_style': 'virtual'})
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config.get('S3_ACCESS_KEY'),
        aws_secret_access_key=current_app.config.get('S3_SECRET_KEY'),
        config=s3_config,
        **s3_kwargs,
    )


def _split_s3(url):
    bucket, key = url.replace('s3://', '', 1).split('/', 1)
    return bucket, key


def _drive_session():
    token = current_app.config.get('GOOGLE_API_TOKEN')
    return build_session(headers={'Authorization': f'Bearer {token}'})


def get_metadata(url: str) -> FileMetadata:
    url = normalize_ref(url)
    try:
        if url.startswith('gdrive://'):
            file_id = url[len('gdrive://'):]
            r = call(_drive_session(), 'GET', f"{DRIVE_API}/{file_id}",
                     params={'fields': 'name,mimeType', 'supportsAllDrives': 'true'})
            data = r.json()
            return FileMetadata(data.get('name', ''), data.get('mimeType', ''))
        if url.startswith('s3://'):
            bucket, key = _split_s3(url)
            head = _s3_client().head_object(Bucket=bucket, Key=key)
            name = os.path.basename(key)
            return FileMetadata(name, head.get('ContentType') or mimetypes.guess_type(name)[0] or '')
        if url.startswith('file://'):
            path = url.replace('file://', '', 1)
            if not os.path.exists(path):
                raise FetchError(f"{url}: no such file")
            name = os.path.basename(path)
            return FileMetadata(name, mimetypes.guess_type(name)[0] or '')
    except (BotoCoreError, ClientError) as e:
        raise FetchError(f"{url}: {e}") from e
    except FetchError:
        raise
    except Exception as e:
        raise FetchError(f"{url}: {e}") from e
    raise FetchError(f"{url}: unsupported storage reference")


def download_bytes(url: str) -> bytes:
    url = normalize_ref(url)
    try:
        if url.startswith('gdrive://'):
            file_id = url[len('gdrive://'):]
            r = call(_drive_session(), 'GET', f"{DRIVE_API}/{file_id}",
                     params={'alt': 'media', 'supportsAllDrives': 'true'})
            return r.content
        if url.startswith('s3://'):
            bucket, key = _split_s3(url)
            obj = _s3_client().get_object(Bucket=bucket, Key=key)
            return obj['Body'].read()
        if url.startswith('file://'):
            path = url.replace('file://', '', 1)
            with open(path, 'rb') as f:
                return f.read()
    except (BotoCoreError, ClientError, OSError) as e:
        raise FetchError(f"{url}: {e}") from e
    except FetchError:
        raise
    except Exception as e:
        raise FetchError(f"{url}: {e}") from e
    raise FetchError(f"{url}: unsupported storage reference")


def export_text(url: str) -> str:
    """Export a native cloud document as plain text."""
    url = normalize_ref(url)
    if not url.startswith('gdrive://'):
        raise FetchError(f"{url}: only drive documents can be exported")
    file_id = url[len('gdrive://'):]
    try:
        r = call(_drive_session(), 'GET', f"{DRIVE_API}/{file_id}/export",
                 params={'mimeType': 'text/plain'})
    except Exception as e:
        raise FetchError(f"{url}: {e}") from e
    return r.content.decode('utf-8', errors='replace')


def upload_bytes(key: str, data: bytes, content_type='application/pdf') -> str:
    """Store a generated document, replacing any existing file at ``key``."""
    backend = current_app.config.get('STORAGE_BACKEND', 'local')
    if backend == 's3':
        bucket = current_app.config.get('S3_BUCKET')
        _s3_client().put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
        return f"s3://{bucket}/{key}"

    d = current_app.config['LOCAL_STORAGE_DIR']
    path = os.path.join(d, key)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(data)
    return f"file://{os.path.abspath(path)}"
