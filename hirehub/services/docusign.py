from dataclasses import dataclass, field

from flask import current_app

from ..errors import ConfigurationError
from ..utils.time import parse_provider_time
from .http import build_session, call


@dataclass
class EnvelopeDocument:
    document_id: str
    name: str


@dataclass
class Envelope:
    envelope_id: str
    status: str
    created_at: object = None
    completed_at: object = None
    documents: list = field(default_factory=list)

    @property
    def completed(self):
        return self.status == "completed"

    @classmethod
    def from_json(cls, data, documents=None):
        docs = documents
        if docs is None:
            docs = [EnvelopeDocument(str(d.get('documentId', '')), d.get('name', ''))
                    for d in data.get('envelopeDocuments') or []]
        return cls(
            envelope_id=data.get('envelopeId', ''),
            status=data.get('status', ''),
            created_at=parse_provider_time(data.get('createdDateTime')),
            completed_at=parse_provider_time(data.get('completedDateTime')),
            documents=docs,
        )


class DocuSignClient:
    def __init__(self, base_url, account_id, token):
        if not (account_id and token):
            raise ConfigurationError("DOCUSIGN_ACCOUNT_ID and DOCUSIGN_TOKEN must be set")
        self.base = f"{base_url.rstrip('/')}/accounts/{account_id}"
        self.session = build_session(headers={'Authorization': f'Bearer {token}'})

    @classmethod
    def from_config(cls):
        cfg = current_app.config
        return cls(cfg.get('DOCUSIGN_BASE_URL'), cfg.get('DOCUSIGN_ACCOUNT_ID'), cfg.get('DOCUSIGN_TOKEN'))

    def list_templates(self):
        r = call(self.session, 'GET', f"{self.base}/templates")
        return r.json().get('envelopeTemplates') or []

    def create_envelope(self, template_id, subject, roles):
        body = {
            "templateId": template_id,
            "emailSubject": subject,
            "templateRoles": roles,
            "status": "sent",
        }
        r = call(self.session, 'POST', f"{self.base}/envelopes", json=body)
        data = r.json()
        return Envelope(envelope_id=data.get('envelopeId', ''), status=data.get('status', ''),
                        created_at=parse_provider_time(data.get('statusDateTime')))

    def get_envelope(self, envelope_id):
        r = call(self.session, 'GET', f"{self.base}/envelopes/{envelope_id}")
        docs = call(self.session, 'GET', f"{self.base}/envelopes/{envelope_id}/documents").json()
        documents = [EnvelopeDocument(str(d.get('documentId', '')), d.get('name', ''))
                     for d in docs.get('envelopeDocuments') or []]
        return Envelope.from_json(r.json(), documents=documents)

    def get_document(self, envelope_id, document_id):
        r = call(self.session, 'GET', f"{self.base}/envelopes/{envelope_id}/documents/{document_id}")
        return r.content

    def get_form_data(self, envelope_id):
        """Signed form fields as a ``{name: value}`` dict."""
        r = call(self.session, 'GET', f"{self.base}/envelopes/{envelope_id}/form_data")
        return {f.get('name', ''): (f.get('value') or '') for f in r.json().get('formData') or []}
