"""Offer letter and employee agreement envelopes.

Each applicant has at most one envelope of each kind. The envelope is created
once, when the applicant reaches Giving offer, and afterwards only polled (or
pushed to us by the provider webhook). Completion files the signed documents,
moves the applicant to Onboarding and seeds their employee record.
"""

import enum
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..errors import ConfigurationError, DataIntegrityError, TransientIOError
from ..extensions import applicant_lock, db
from ..models.applicant import Applicant
from ..models.employee import Employee
from ..models.status import OFFER_STATUSES, ApplicantStatus
from ..services import storage as default_storage
from ..services.airtable import Workspace
from ..services.docusign import DocuSignClient
from ..utils.time import to_db, utcnow
from .background import send_background_check_invitation
from .notify import notify_chat
from .workspace import pull_workspace_fields


class EnvelopeKind(enum.Enum):
    OFFER = "offer"
    AGREEMENTS = "agreements"


@dataclass(frozen=True)
class EnvelopeSpec:
    template_setting: str
    subject: str
    label: str
    # (template role name, signer key, routing order)
    routing: tuple
    # (markers in the document name, file name template), first match wins
    filenames: tuple


SPECS = {
    EnvelopeKind.OFFER: EnvelopeSpec(
        template_setting="ESIGN_OFFER_TEMPLATE",
        subject="Sign your {company} Offer Letter",
        label="docusign offer",
        routing=(("CEO", "officer", 1), ("Applicant", "applicant", 2), ("HR", "hr", 3)),
        filenames=(
            (("Offer Letter",), "{name} - Offer.pdf"),
            (("Summary",), "{name} - Offer - DocuSign Summary.pdf"),
            (("Employee Mediation", "Employee_Mediation"), "{name} - Mediation Agreement.pdf"),
            (("Employee Proprietary", "Employee_Proprietary"), "{name} - PIIA.pdf"),
        ),
    ),
    EnvelopeKind.AGREEMENTS: EnvelopeSpec(
        template_setting="ESIGN_AGREEMENTS_TEMPLATE",
        subject="Sign your {company} Employee Agreements",
        label="docusign employee agreements",
        routing=(("CEO", "officer", 1), ("Applicant", "applicant", 2), ("CEO (2)", "officer", 3), ("HR", "hr", 4)),
        filenames=(
            (("Employee Mediation", "Employee_Mediation"), "{name} - Mediation Agreement.pdf"),
            (("Employee Proprietary", "Employee_Proprietary"), "{name} - PIIA.pdf"),
            (("Summary",), "{name} - Employee Agreements - DocuSign Summary.pdf"),
            (("Offer Letter",), "{name} - Offer.pdf"),
        ),
    ),
}

FORM_STREET = "Applicant's Street Address"
FORM_CITY = "Applicant's City"
FORM_STATE = "Applicant's State"
FORM_ZIP = "Applicant's Postal Code"
FORM_COUNTRY = "Applicant's Country"
FORM_START_DATE = "Start Date"

US_STATES = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas", "CA": "California",
    "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware", "DC": "District of Columbia",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho", "IL": "Illinois",
    "IN": "Indiana", "IA": "Iowa", "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana",
    "ME": "Maine", "MD": "Maryland", "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota",
    "MS": "Mississippi", "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma", "OR": "Oregon",
    "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina", "SD": "South Dakota",
    "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont", "VA": "Virginia",
    "WA": "Washington", "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}


def _get(applicant, kind, attr):
    return getattr(applicant, f"{kind.value}_{attr}")


def _set(applicant, kind, attr, value):
    setattr(applicant, f"{kind.value}_{attr}", value)


def get_template_id(ds, name):
    """Id of the template called ``name``, or "" if there is none."""
    for t in ds.list_templates():
        if t.get("name") == name:
            return t.get("templateId") or ""
    return ""


def require_template_id(ds, kind):
    name = current_app.config.get(SPECS[kind].template_setting)
    template_id = get_template_id(ds, name)
    if not template_id:
        raise ConfigurationError(f"no e-sign template named {name!r}")
    return template_id


def build_roles(kind, applicant, company, signers=None):
    signers = signers if signers is not None else current_app.config.get('ESIGN_SIGNERS') or {}
    spec = SPECS[kind]
    subject = spec.subject.format(company=company)
    roles = []
    for role_name, signer_key, order in spec.routing:
        if signer_key == "applicant":
            who = {"name": applicant.name, "email": applicant.email}
        else:
            who = signers.get(signer_key)
            if not who or not who.get("email"):
                raise ConfigurationError(f"no '{signer_key}' signer configured")
        roles.append({
            "roleName": role_name,
            "name": who["name"],
            "email": who["email"],
            "routingOrder": str(order),
            "emailNotification": {"emailSubject": subject, "emailBody": "", "language": "en"},
        })
    return roles


def document_filename(kind, applicant_name, document_name):
    for markers, template in SPECS[kind].filenames:
        if any(m in document_name for m in markers):
            return template.format(name=applicant_name)
    base = document_name[:-4] if document_name.lower().endswith(".pdf") else document_name
    return f"{applicant_name} - {base}.pdf"


def file_documents(applicant, kind, envelope, ds, storage=None):
    """Download and store each signed document; returns the names that failed."""
    storage = storage or default_storage
    folder = current_app.config.get('OFFER_DOCUMENTS_FOLDER', 'Offer Letters')
    failed = []
    for doc in envelope.documents:
        filename = document_filename(kind, applicant.name, doc.name)
        try:
            data = ds.get_document(envelope.envelope_id, doc.document_id)
            storage.upload_bytes(f"{folder}/{applicant.name}/{filename}", data)
        except Exception:
            current_app.logger.exception('filing %r for %s failed', filename, applicant.email)
            failed.append(filename)
        else:
            current_app.logger.info('filed %r for %s', filename, applicant.email)
    return failed


def _username(name):
    parts = (name or "").split()
    return parts[0].lower() if parts else ""


def parse_start_date(form):
    raw = (form.get(FORM_START_DATE) or "").strip()
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%m/%d/%Y").date()
    except ValueError as e:
        raise DataIntegrityError(f"malformed start date {raw!r} in signed offer") from e


def seed_from_offer(applicant, org, form, slack=None):
    """Copy the address and start date the applicant entered into the offer."""
    start = parse_start_date(form)

    employee = Employee.query.filter_by(org_id=org.id, recovery_email=applicant.email).first()
    if employee is None:
        employee = Employee(org_id=org.id, username=_username(applicant.name),
                            full_name=applicant.name, recovery_email=applicant.email)
        db.session.add(employee)
    if not employee.has_address:
        state = (form.get(FORM_STATE) or "").strip()
        employee.home_address_street_1 = (form.get(FORM_STREET) or "").strip()
        employee.home_address_city = (form.get(FORM_CITY) or "").strip()
        employee.home_address_state = US_STATES.get(state.upper(), state)
        employee.home_address_zipcode = (form.get(FORM_ZIP) or "").strip()
        employee.home_address_country = (form.get(FORM_COUNTRY) or "").strip()
    if start is not None and employee.start_date is None:
        employee.start_date = start
    db.session.commit()

    if start is not None and applicant.start_date != start:
        applicant.start_date = start
        db.session.commit()
        notify_chat(applicant, org, f"start date is now `{start.isoformat()}`", slack=slack)


def update_from_envelope(applicant, kind, envelope, org, ds, storage=None, slack=None, checkr=None):
    """Fold the provider's view of an envelope into the applicant.

    Completion side effects run once: a completed envelope that is already
    recorded as completed is a no-op.
    """
    spec = SPECS[kind]
    previous = _get(applicant, kind, "envelope_status") or ""
    changed = previous != envelope.status
    if envelope.created_at is not None:
        _set(applicant, kind, "created_at", to_db(envelope.created_at))

    if not envelope.completed:
        _set(applicant, kind, "envelope_status", envelope.status)
        db.session.commit()
        if changed:
            notify_chat(applicant, org, f"{spec.label} status is now `{envelope.status}`", slack=slack)
        return changed

    if not changed:
        return False

    if kind is EnvelopeKind.OFFER and applicant.status == ApplicantStatus.GIVING_OFFER:
        applicant.status = ApplicantStatus.ONBOARDING
        db.session.commit()
        notify_chat(applicant, org, f"status is now `{applicant.status}`", slack=slack)
        if not applicant.criminal_background_check_status:
            send_background_check_invitation(applicant, org, checkr=checkr, slack=slack)

    failed = file_documents(applicant, kind, envelope, ds, storage)

    if kind is EnvelopeKind.OFFER:
        seed_from_offer(applicant, org, ds.get_form_data(envelope.envelope_id), slack=slack)

    if failed:
        # leave the envelope unrecorded so the next pass files the rest
        raise TransientIOError(f"could not file {', '.join(failed)} for {applicant.email}")

    _set(applicant, kind, "envelope_status", envelope.status)
    _set(applicant, kind, "completed_at", to_db(envelope.completed_at or utcnow()))
    db.session.commit()
    notify_chat(applicant, org, f"{spec.label} status is now `{envelope.status}`", slack=slack)
    return True


def do_envelope(applicant, kind, org, ds, template_id, storage=None, slack=None, checkr=None):
    """Create the applicant's envelope if it is due, otherwise refresh it."""
    if applicant.status not in OFFER_STATUSES:
        return None

    if not _get(applicant, kind, "envelope_id"):
        if applicant.status != ApplicantStatus.GIVING_OFFER:
            return None
        with applicant_lock(applicant.id):
            db.session.refresh(applicant)
            if _get(applicant, kind, "envelope_id"):
                return None
            company = current_app.config.get('COMPANY_NAME', '')
            envelope = ds.create_envelope(template_id, SPECS[kind].subject.format(company=company),
                                          build_roles(kind, applicant, company))
            _set(applicant, kind, "envelope_id", envelope.envelope_id)
            _set(applicant, kind, "envelope_status", envelope.status)
            if envelope.created_at is not None:
                _set(applicant, kind, "created_at", to_db(envelope.created_at))
            db.session.commit()
        current_app.logger.info('created %s envelope %s for %s', kind.value, envelope.envelope_id, applicant.email)
        notify_chat(applicant, org, f"{SPECS[kind].label} status is now `{envelope.status}`", slack=slack)
        return envelope

    envelope = ds.get_envelope(_get(applicant, kind, "envelope_id"))
    update_from_envelope(applicant, kind, envelope, org, ds, storage=storage, slack=slack, checkr=checkr)
    return envelope


def refresh_envelopes(org, ds=None, workspace=None, storage=None, slack=None, checkr=None):
    """Create or poll envelopes for everyone with an offer in flight."""
    ds = ds or DocuSignClient.from_config()
    template_ids = {kind: require_template_id(ds, kind) for kind in EnvelopeKind}
    workspace = workspace or Workspace.for_org(org)

    applicants = (Applicant.query
                  .filter(Applicant.org_id == org.id, Applicant.status.in_(list(OFFER_STATUSES)))
                  .order_by(Applicant.id)
                  .all())
    for applicant in applicants:
        try:
            pull_workspace_fields(applicant, org, workspace, slack=slack)
        except ConfigurationError:
            raise
        except Exception:
            db.session.rollback()
            current_app.logger.exception('reading workspace fields for %s failed', applicant.email)
            continue
        for kind in EnvelopeKind:
            try:
                do_envelope(applicant, kind, org, ds, template_ids[kind],
                            storage=storage, slack=slack, checkr=checkr)
            except ConfigurationError:
                raise
            except Exception:
                db.session.rollback()
                current_app.logger.exception('%s envelope for %s failed', kind.value, applicant.email)
