"""Periodic passes over every applicant.

Applicants are processed one at a time. A failure on one applicant is logged
and the pass moves on; a ConfigurationError stops the pass since every other
applicant would hit it too.
"""

from datetime import date

from flask import current_app

from ..errors import ConfigurationError
from ..extensions import db
from ..models.applicant import Applicant
from ..services.airtable import Workspace
from ..services.github_issues import IssueTracker
from ..services.sheets import SheetsClient, column_letter
from .expand import expand, send_follow_up_if_necessary
from .interviews import sync_interviews, update_interviews_window
from .notify import notify_chat
from .onboarding import LABEL, sync_onboarding_issue
from .reconcile import apply_fields, parse_columns, parse_row, reconcile
from .scoring import update_reviews_scoring
from .status import update_status
from .workspace import find_workspace_record, mirror_to_workspace, pull_workspace_fields


def _notify_if_changed(applicant, org, previous, slack=None):
    if previous is None or previous == applicant.status:
        return False
    current_app.logger.info('applicant %s status %s -> %s', applicant.email, previous, applicant.status)
    notify_chat(applicant, org, f"status is now `{applicant.status}`", slack=slack)
    return True


def _write_back_flags(sheets, sheet_id, columns, row_number, applicant, parsed):
    for key in ("sent_email_received", "sent_email_follow_up"):
        if key not in columns or parsed[key] or not getattr(applicant, key):
            continue
        sheets.update_cell(sheet_id, f"{column_letter(columns[key])}{row_number}", "TRUE")


def refresh_applicant_from_row(org, role, sheet_id, columns, row, row_number, workspace=None,
                               sheets=None, storage=None, slack=None, today=None, now=None):
    parsed = parse_row(role, sheet_id, columns, row)
    existing = Applicant.query.filter_by(email=parsed["email"], sheet_id=sheet_id).first()
    record = None
    if workspace is not None:
        lookup = existing or Applicant(email=parsed["email"], sheet_id=sheet_id)
        record = find_workspace_record(lookup, workspace)

    previous = existing.status if existing else None
    fields = reconcile(parsed, existing, record, today=today)
    applicant = existing or Applicant(org_id=org.id)
    apply_fields(applicant, fields)
    if existing is None:
        db.session.add(applicant)
    db.session.commit()
    _notify_if_changed(applicant, org, previous, slack=slack)

    expand(applicant, org, has_workspace_record=record is not None, storage=storage, slack=slack, now=now)
    send_follow_up_if_necessary(applicant, org)
    if sheets is not None:
        _write_back_flags(sheets, sheet_id, columns, row_number, applicant, parsed)
    if workspace is not None:
        mirror_to_workspace(applicant, workspace, record)
    return applicant


def refresh_db_applicants(org, sheets=None, workspace=None, storage=None, slack=None):
    """Reconcile every row of every hiring sheet into the database."""
    sheets = sheets or SheetsClient.from_config()
    workspace = workspace or Workspace.for_org(org)
    a1_range = current_app.config.get('HIRING_SHEET_RANGE')
    count = 0
    for role, sheet_id in (current_app.config.get('HIRING_SHEETS') or {}).items():
        values = sheets.get_values(sheet_id, a1_range)
        if not values:
            current_app.logger.warning('sheet %s for %s returned no rows', sheet_id, role)
            continue
        columns = parse_columns(values[0])
        for row_number, row in enumerate(values[1:], start=2):
            email_index = columns["email"]
            email = row[email_index].strip() if email_index < len(row) else ""
            # the form appends rows, so the first blank email ends the data
            if not email:
                break
            try:
                refresh_applicant_from_row(org, role, sheet_id, columns, row, row_number,
                                           workspace=workspace, sheets=sheets, storage=storage, slack=slack)
                count += 1
            except ConfigurationError:
                raise
            except Exception:
                db.session.rollback()
                current_app.logger.exception('refreshing applicant %s from %s failed', email, role)
    return count


def refresh_applicant(applicant, org, workspace, storage=None, slack=None, tracker=None, issues=None, today=None):
    """Everything except the sheet merge: workspace fields, status, emails, reviews."""
    record = pull_workspace_fields(applicant, org, workspace, slack=slack)
    if not applicant.sheet_id:
        expand(applicant, org, has_workspace_record=record is not None, storage=storage, slack=slack)

    update_status(applicant, org, slack=slack, today=today or date.today())
    send_follow_up_if_necessary(applicant, org)
    update_interviews_window(applicant)
    update_reviews_scoring(applicant, workspace)
    if tracker is not None:
        sync_onboarding_issue(applicant, org, tracker, issues)
    mirror_to_workspace(applicant, workspace, record)
    return applicant


def refresh_new_applicants_and_reviews(org, workspace=None, storage=None, slack=None, tracker=None):
    workspace = workspace or Workspace.for_org(org)
    if tracker is None and org.github_org:
        tracker = IssueTracker.for_org(org)
    issues = tracker.list_issues(LABEL) if tracker is not None else None
    sync_interviews(org, workspace)

    applicants = Applicant.query.filter_by(org_id=org.id).order_by(Applicant.id).all()
    for applicant in applicants:
        try:
            refresh_applicant(applicant, org, workspace, storage=storage, slack=slack,
                              tracker=tracker, issues=issues)
        except ConfigurationError:
            raise
        except Exception:
            db.session.rollback()
            current_app.logger.exception('refreshing applicant %s failed', applicant.email)
    return len(applicants)
