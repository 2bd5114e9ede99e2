import os
import sys

import pytest
import requests

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hirehub.errors import ConfigurationError, NotFoundError, ProviderError, TransientIOError
from hirehub.services.airtable import WorkspaceTable
from hirehub.services.http import call


class FakeResponse:
    def __init__(self, status_code, data=None):
        self.status_code = status_code
        self.data = data or {}
        self.text = str(self.data)

    def json(self):
        return self.data


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


@pytest.mark.parametrize("status, error", [
    (503, TransientIOError),
    (401, ConfigurationError),
    (403, ConfigurationError),
    (404, NotFoundError),
    (422, ProviderError),
])
def test_status_codes_map_to_errors(app, status, error):
    with pytest.raises(error):
        call(FakeSession(FakeResponse(status)), 'GET', 'https://api.example.com/x')


def test_connection_error_is_transient(app):
    session = FakeSession(requests.ConnectionError("connection refused"))
    with pytest.raises(TransientIOError):
        call(session, 'GET', 'https://api.example.com/x')


def test_default_timeout(app):
    session = FakeSession(FakeResponse(200, {"ok": True}))
    assert call(session, 'GET', 'https://api.example.com/x').json() == {"ok": True}
    assert session.requests[0][2]["timeout"] == 30


def test_workspace_find_follows_offsets(app):
    session = FakeSession(
        FakeResponse(200, {"records": [{"id": "rec1", "fields": {}}], "offset": "page2"}),
        FakeResponse(200, {"records": [{"id": "rec2", "fields": {}}]}),
    )
    table = WorkspaceTable(session, "app123", "Applicants")

    records = table.find("{email}='jane@example.com'")

    assert [r["id"] for r in records] == ["rec1", "rec2"]
    assert session.requests[1][2]["params"]["offset"] == "page2"
    assert session.requests[0][1] == "https://api.airtable.com/v0/app123/Applicants"
