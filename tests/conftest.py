import os
import sys
import types
from datetime import datetime, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import Config
from hirehub import create_app
from hirehub.errors import FetchError, NotFoundError, ProviderError
from hirehub.extensions import db
from hirehub.jobs import background, notify
from hirehub.models import Applicant, ApplicantStatus, Organization
from hirehub.services.docusign import Envelope
from hirehub.services.storage import FileMetadata


class TestingConfig(Config):
    __test__ = False
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    REDIS_URL = None
    SENDGRID_API_KEY = "test"
    GOOGLE_GEOCODE_KEY = None
    HIRING_SHEETS = {}
    COMPANY_NAME = "Oxide"
    ESIGN_SIGNERS = {
        "officer": {"name": "Chief Executive", "email": "ceo@example.com"},
        "hr": {"name": "People Operations", "email": "people@example.com"},
    }
    PHONE_COUNTRY_HINTS = None
    HTTP_RETRIES = 0


class FakeSlack:
    def __init__(self):
        self.messages = []

    def post_message(self, channel, message):
        self.messages.append((channel, message))
        return str(len(self.messages))

    @property
    def updates(self):
        return [m["text"] for _, m in self.messages]


class FakeTable:
    def __init__(self):
        self.records = {}
        self.deleted = []

    def get(self, record_id):
        if record_id not in self.records:
            raise NotFoundError(record_id)
        return self.records[record_id]

    def find(self, formula=None):
        out = []
        for record in self.records.values():
            fields = record["fields"]
            if formula and (f"{{email}}='{fields.get('email', '')}'" not in formula
                            or f"{{sheet_id}}='{fields.get('sheet_id', '')}'" not in formula):
                continue
            out.append(record)
        return out

    def upsert(self, fields, record_id=None):
        if record_id is None:
            record_id = f"rec{len(self.records) + 1}"
            self.records[record_id] = {"id": record_id, "fields": {}}
        self.records[record_id]["fields"].update(fields)
        return self.records[record_id]

    def add(self, record_id, **fields):
        self.records[record_id] = {"id": record_id, "fields": fields}

    def delete(self, record_id):
        self.deleted.append(record_id)
        self.records.pop(record_id, None)


class FakeWorkspace:
    def __init__(self):
        self.applicants = FakeTable()
        self.reviews = FakeTable()
        self.interviews = FakeTable()


class FakeDocuSign:
    def __init__(self):
        self.templates = [
            {"templateId": "tpl-offer", "name": "Employee Offer Letter (US)"},
            {"templateId": "tpl-agreements", "name": "Employee Agreements (Mediation, PIIA)"},
        ]
        self.created = []
        self.envelopes = {}
        self.documents = {}
        self.failing = set()
        self.form_data = {}

    def list_templates(self):
        return self.templates

    def create_envelope(self, template_id, subject, roles):
        envelope_id = f"env-{len(self.created) + 1}"
        self.created.append({"template_id": template_id, "subject": subject, "roles": roles})
        created = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        self.envelopes[envelope_id] = Envelope(envelope_id, "sent", created_at=created)
        return Envelope(envelope_id, "sent", created_at=created)

    def get_envelope(self, envelope_id):
        return self.envelopes[envelope_id]

    def get_document(self, envelope_id, document_id):
        if document_id in self.failing:
            raise ProviderError(f"document {document_id} unavailable", status_code=400)
        return self.documents.get(document_id, b"%PDF-1.4 signed")

    def get_form_data(self, envelope_id):
        return dict(self.form_data)


class FakeStorage:
    def __init__(self):
        self.files = {}
        self.downloads = []
        self.uploads = {}
        self.upload_calls = 0

    def add(self, ref, name, mime_type, data=b""):
        self.files[ref] = (FileMetadata(name, mime_type), data)

    def get_metadata(self, ref):
        if ref not in self.files:
            raise FetchError(f"{ref}: not found")
        return self.files[ref][0]

    def download_bytes(self, ref):
        self.downloads.append(ref)
        return self.files[ref][1]

    def export_text(self, ref):
        return self.files[ref][1].decode("utf-8")

    def upload_bytes(self, key, data, content_type="application/pdf"):
        self.upload_calls += 1
        self.uploads[key] = data
        return f"file:///{key}"


class FakeCheckr:
    def __init__(self):
        self.candidates = []
        self.invitations = []
        self.reports = {}

    def list_candidates(self):
        return self.candidates

    def get_candidate(self, candidate_id):
        return next(c for c in self.candidates if c["id"] == candidate_id)

    def create_candidate(self, email):
        candidate = {"id": f"cand-{len(self.candidates) + 1}", "email": email, "report_ids": []}
        self.candidates.append(candidate)
        return candidate

    def create_invitation(self, candidate_id, package):
        self.invitations.append((candidate_id, package))
        return {"id": f"inv-{len(self.invitations)}"}

    def get_report(self, report_id):
        return self.reports[report_id]


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def org(app):
    org = Organization(name="Oxide Computer Company", mail_domain="example.com",
                       slack_channel_applicants="#applicants", airtable_base_id="app123")
    db.session.add(org)
    db.session.commit()
    return org


@pytest.fixture
def slack(monkeypatch):
    fake = FakeSlack()
    monkeypatch.setattr(notify, "SlackClient", types.SimpleNamespace(from_config=lambda: fake))
    return fake


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    def fake_send(to_email, subject, text, cc=None):
        sent.append({"to": to_email, "subject": subject, "text": text, "cc": cc})
        return 202, {}

    monkeypatch.setattr(notify, "send_email", fake_send)
    return sent


@pytest.fixture
def checkr(monkeypatch):
    fake = FakeCheckr()
    monkeypatch.setattr(background, "CheckrClient", types.SimpleNamespace(from_config=lambda: fake))
    return fake


@pytest.fixture
def workspace():
    return FakeWorkspace()


@pytest.fixture
def docusign():
    return FakeDocuSign()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def make_applicant(org):
    def make(**fields):
        values = {
            "org_id": org.id,
            "name": "Jane Doe",
            "email": "jane@example.com",
            "role": "Software Engineer",
            "sheet_id": "sheet-1",
            "status": ApplicantStatus.NEEDS_TO_BE_TRIAGED,
            "submitted_time": datetime(2026, 10, 1, 17, 30),
            "sent_email_received": True,
            "sent_email_follow_up": True,
        }
        values.update(fields)
        applicant = Applicant(**values)
        db.session.add(applicant)
        db.session.commit()
        return applicant
    return make
