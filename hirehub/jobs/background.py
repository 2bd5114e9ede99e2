from flask import current_app
from sqlalchemy import or_

from ..extensions import db
from ..models.applicant import Applicant
from ..models.status import ApplicantStatus
from ..services.checkr import CheckrClient
from .notify import notify_chat

CRIMINAL_PACKAGE = "premium_criminal"
MOTOR_VEHICLE_PACKAGE = "motor_vehicle"


def send_background_check_invitation(applicant, org, checkr=None, slack=None):
    """Invite the applicant to the criminal background check, once."""
    if applicant.criminal_background_check_status:
        return False
    checkr = checkr or CheckrClient.from_config()

    candidate = next((c for c in checkr.list_candidates()
                      if (c.get("email") or "").lower() == applicant.email.lower()), None)
    if candidate is None:
        candidate = checkr.create_candidate(applicant.email)
    checkr.create_invitation(candidate["id"], CRIMINAL_PACKAGE)

    applicant.criminal_background_check_status = "requested"
    db.session.commit()
    current_app.logger.info('requested background check for %s', applicant.email)
    notify_chat(applicant, org, "background check status is now `requested`", slack=slack)
    return True


def apply_report(applicant, org, report, slack=None):
    status = report.get("status") or ""
    package = report.get("package")
    if package == CRIMINAL_PACKAGE:
        if applicant.criminal_background_check_status == status:
            return False
        applicant.criminal_background_check_status = status
        db.session.commit()
        notify_chat(applicant, org, f"criminal background check status is now `{status}`", slack=slack)
        return True
    if package == MOTOR_VEHICLE_PACKAGE:
        if applicant.motor_vehicle_background_check_status == status:
            return False
        applicant.motor_vehicle_background_check_status = status
        db.session.commit()
        return True
    return False


def find_onboarding_applicant(org, candidate):
    name = f"{candidate.get('first_name') or ''} {candidate.get('last_name') or ''}".strip()
    email = candidate.get("email") or ""
    return (Applicant.query
            .filter_by(org_id=org.id, status=ApplicantStatus.ONBOARDING)
            .filter(or_(Applicant.email == email, Applicant.name == name))
            .first())


def refresh_background_checks(org, checkr=None, slack=None):
    checkr = checkr or CheckrClient.from_config()
    updated = 0
    for candidate in checkr.list_candidates():
        applicant = find_onboarding_applicant(org, candidate)
        if applicant is None:
            continue
        for report_id in candidate.get("report_ids") or []:
            if apply_report(applicant, org, checkr.get_report(report_id), slack=slack):
                updated += 1
    return updated
