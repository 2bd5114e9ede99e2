from datetime import date

from flask import current_app

from ..extensions import db
from ..models.status import ApplicantStatus
from .notify import notify_chat

EARLY_STATUSES = frozenset({ApplicantStatus.NEXT_STEPS, ApplicantStatus.NEEDS_TO_BE_TRIAGED})
PRE_START_STATUSES = frozenset({ApplicantStatus.ONBOARDING, ApplicantStatus.GIVING_OFFER})


def derive_status(status, interview_count, start_date, today=None):
    """Apply the automatic transitions to ``status``.

    * more than one interview moves an early applicant to Interviewing
    * reaching the start date moves Onboarding / Giving offer to Hired

    Every other status is left alone; Declined, Deferred and Giving offer are
    set by people.
    """
    today = today or date.today()
    if interview_count > 1 and status in EARLY_STATUSES:
        status = ApplicantStatus.INTERVIEWING
    # TODO: someone who is Hired and later leaves has no way back out of Hired;
    # decide with people ops whether that needs a separate terminal status.
    if status in PRE_START_STATUSES and start_date is not None and start_date <= today:
        status = ApplicantStatus.HIRED
    return status


def update_status(applicant, org, slack=None, today=None):
    """Derive the status, persist it and notify only if it changed."""
    new = derive_status(applicant.status, len(applicant.interviews or []), applicant.start_date, today)
    if new == applicant.status:
        return False

    old = applicant.status
    applicant.status = new
    db.session.commit()
    current_app.logger.info('applicant %s status %s -> %s', applicant.email, old, new)
    notify_chat(applicant, org, f"status is now `{new}`", slack=slack)
    return True
