"""Provider callbacks, mapped onto the same operations the periodic passes use."""

from flask import current_app

from ..errors import DataIntegrityError
from ..extensions import db
from ..models.applicant import Applicant
from ..models.organization import Organization
from ..services.airtable import Workspace
from ..services.checkr import CheckrClient
from ..services.docusign import DocuSignClient
from .background import apply_report, find_onboarding_applicant, send_background_check_invitation
from .envelopes import EnvelopeKind, update_from_envelope
from .refresh import refresh_applicant
from .workspace import pull_workspace_fields


def _envelope_id(payload):
    envelope_id = payload.get("envelopeId") or (payload.get("data") or {}).get("envelopeId")
    if not envelope_id:
        raise DataIntegrityError("envelope event without an envelopeId")
    return envelope_id


def handle_envelope_update(payload, ds=None, workspace=None, storage=None, slack=None, checkr=None):
    envelope_id = _envelope_id(payload)
    kind = EnvelopeKind.OFFER
    applicant = Applicant.query.filter_by(offer_envelope_id=envelope_id).first()
    if applicant is None:
        kind = EnvelopeKind.AGREEMENTS
        applicant = Applicant.query.filter_by(agreements_envelope_id=envelope_id).first()
    if applicant is None:
        current_app.logger.warning('no applicant has envelope %s', envelope_id)
        return None

    org = db.session.get(Organization, applicant.org_id)
    pull_workspace_fields(applicant, org, workspace or Workspace.for_org(org), slack=slack)
    ds = ds or DocuSignClient.from_config()
    envelope = ds.get_envelope(envelope_id)
    update_from_envelope(applicant, kind, envelope, org, ds, storage=storage, slack=slack, checkr=checkr)
    return applicant.id


def handle_background_report(payload, checkr=None, slack=None):
    if not (payload.get("type") or "").startswith("report."):
        return None
    report = (payload.get("data") or {}).get("object") or {}
    if not report.get("candidate_id"):
        raise DataIntegrityError("report event without a candidate_id")

    checkr = checkr or CheckrClient.from_config()
    candidate = checkr.get_candidate(report["candidate_id"])
    for org in Organization.query.order_by(Organization.id).all():
        applicant = find_onboarding_applicant(org, candidate)
        if applicant is not None:
            apply_report(applicant, org, report, slack=slack)
            return applicant.id
    current_app.logger.warning('no onboarding applicant for background check candidate %s', candidate.get("id"))
    return None


def _applicant_for_record(payload):
    record_id = payload.get("record_id")
    if not record_id:
        raise DataIntegrityError("workspace event without a record_id")
    query = Applicant.query.filter_by(workspace_record_id=record_id)
    org_id = payload.get("org_id")
    if org_id:
        query = query.filter_by(org_id=int(org_id))
    applicant = query.first()
    if applicant is None:
        current_app.logger.warning('no applicant for workspace record %s', record_id)
        return None, None
    return applicant, db.session.get(Organization, applicant.org_id)


def handle_workspace_applicant_update(payload, workspace=None, storage=None, slack=None):
    applicant, org = _applicant_for_record(payload)
    if applicant is None:
        return None
    workspace = workspace or Workspace.for_org(org)
    refresh_applicant(applicant, org, workspace, storage=storage, slack=slack)
    return applicant.id


def handle_background_check_request(payload, checkr=None, slack=None):
    applicant, org = _applicant_for_record(payload)
    if applicant is None:
        return None
    send_background_check_invitation(applicant, org, checkr=checkr, slack=slack)
    return applicant.id
