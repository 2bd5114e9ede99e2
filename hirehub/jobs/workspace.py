from datetime import date, datetime

from flask import current_app

from ..errors import NotFoundError
from ..extensions import db
from ..models.applicant import Applicant
from ..models.status import ApplicantStatus
from .notify import notify_chat
from .reconcile import keep_fields_from_workspace

# fields humans edit in the workspace; never written back from here
WORKSPACE_OWNED = frozenset({"scorers", "interviews", "link_to_reviews"})
# the workspace rejects cells longer than this
MAX_TEXT = 100000
SKIPPED = frozenset({"id", "org_id", "workspace_record_id", "created_at", "updated_at"})


def _escape(value):
    return value.replace("\\", "\\\\").replace("'", "\\'")


def find_workspace_record(applicant, workspace):
    """The applicant's workspace record, or None if it has not been created yet."""
    table = workspace.applicants
    if applicant.workspace_record_id:
        try:
            return table.get(applicant.workspace_record_id)
        except NotFoundError:
            current_app.logger.warning('workspace record %s for %s is gone',
                                       applicant.workspace_record_id, applicant.email)
    formula = f"AND({{email}}='{_escape(applicant.email)}',{{sheet_id}}='{_escape(applicant.sheet_id or '')}')"
    records = table.find(formula)
    return records[0] if records else None


def _to_workspace(value):
    if isinstance(value, ApplicantStatus):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str) and len(value) > MAX_TEXT:
        return value[:MAX_TEXT]
    return value


def workspace_fields(applicant):
    fields = {}
    for column in Applicant.__table__.columns:
        name = column.key
        if name in SKIPPED or name in WORKSPACE_OWNED:
            continue
        fields[name] = _to_workspace(getattr(applicant, name))
    return fields


def mirror_to_workspace(applicant, workspace, record=None):
    """Create or update the applicant's workspace record."""
    record_id = (record or {}).get("id") or applicant.workspace_record_id or None
    saved = workspace.applicants.upsert(workspace_fields(applicant), record_id=record_id)
    if saved.get("id") and saved["id"] != applicant.workspace_record_id:
        applicant.workspace_record_id = saved["id"]
        db.session.commit()
    return saved


def pull_workspace_fields(applicant, org, workspace, slack=None):
    """Apply manual workspace edits to the applicant; returns the record."""
    record = find_workspace_record(applicant, workspace)
    previous = applicant.status
    keep_fields_from_workspace(applicant, record)
    db.session.commit()
    if applicant.status != previous:
        current_app.logger.info('applicant %s status %s -> %s from workspace', applicant.email,
                                previous, applicant.status)
        notify_chat(applicant, org, f"status is now `{applicant.status}`", slack=slack)
    return record
