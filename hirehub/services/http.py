"""Shared requests session for the REST collaborators.

Connection errors and 5xx are retried with exponential backoff by urllib3;
whatever is still failing afterwards is translated into the error taxonomy.
"""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from flask import current_app

from ..errors import ConfigurationError, NotFoundError, ProviderError, TransientIOError


def build_session(headers=None, retries=None):
    if retries is None:
        retries = current_app.config.get('HTTP_RETRIES', 3)
    retry = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=None,
        raise_on_status=False,
    )
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    s.mount('https://', adapter)
    s.mount('http://', adapter)
    if headers:
        s.headers.update(headers)
    return s


def call(session, method, url, **kwargs):
    """Perform a request and return the response, or raise a HireHubError."""
    kwargs.setdefault('timeout', current_app.config.get('HTTP_TIMEOUT_SEC', 30))
    try:
        r = session.request(method, url, **kwargs)
    except requests.RequestException as e:
        raise TransientIOError(f"{method} {url}: {e}") from e

    if r.status_code >= 500:
        raise TransientIOError(f"{method} {url}: {r.status_code} {r.text[:200]}")
    if r.status_code in (401, 403):
        raise ConfigurationError(f"{method} {url}: {r.status_code} check credentials")
    if r.status_code == 404:
        raise NotFoundError(f"{method} {url}: not found")
    if r.status_code >= 400:
        raise ProviderError(f"{method} {url}: {r.status_code} {r.text[:200]}", status_code=r.status_code)
    return r
