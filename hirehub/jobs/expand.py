from flask import current_app

from ..errors import ExtractError
from ..extensions import db
from ..models.status import ApplicantStatus
from ..services.extract import extract
from ..services.geocode import geocode
from ..services.mail import internal_notice, received_email, rejection_email, rejection_variant
from ..services.phone import cleanup_phone
from ..services.segmenter import parse_materials
from ..utils.time import to_db, utcnow
from .notify import notify_chat, notify_email
from .reconcile import cleanup_linkedin, parse_github_gitlab, should_extract


def set_lat_long(applicant):
    if applicant.latitude or applicant.longitude or not applicant.location:
        return False
    found = geocode(applicant.location)
    if found is None:
        return False
    applicant.latitude, applicant.longitude = found
    return True


def extract_documents(applicant, storage=None):
    """Refresh resume and materials text and the segments parsed from it."""
    log = current_app.logger
    if applicant.resume:
        try:
            applicant.resume_contents = extract(applicant.resume, storage)
        except ExtractError as e:
            log.warning('extracting resume for %s failed: %s', applicant.email, e)
    if applicant.materials:
        try:
            applicant.materials_contents = extract(applicant.materials, storage)
        except ExtractError as e:
            log.warning('extracting materials for %s failed: %s', applicant.email, e)
    if applicant.materials_contents:
        for field, value in parse_materials(applicant.materials_contents).items():
            setattr(applicant, field, value)


def _careers_address(org):
    return f"careers@{org.mail_domain}" if org.mail_domain else None


def send_received_email(applicant, org, slack=None):
    if applicant.sent_email_received:
        return False
    company = current_app.config.get('COMPANY_NAME', '')
    subject, body = received_email(applicant, company)
    notify_email(applicant, org, applicant.email, subject, body)
    careers = _careers_address(org)
    if careers:
        subject, body = internal_notice(applicant)
        notify_email(applicant, org, careers, subject, body)
    applicant.sent_email_received = True
    db.session.commit()
    notify_chat(applicant, org, f"new application for {applicant.role}", slack=slack)
    return True


def send_follow_up_if_necessary(applicant, org):
    """Send the rejection email to declined or deferred applicants, once."""
    if applicant.sent_email_follow_up:
        return False
    if applicant.status not in (ApplicantStatus.NEEDS_TO_BE_TRIAGED, ApplicantStatus.DECLINED,
                                ApplicantStatus.DEFERRED):
        # they are past triage; a rejection no longer applies
        applicant.sent_email_follow_up = True
        db.session.commit()
        return False
    if applicant.status == ApplicantStatus.NEEDS_TO_BE_TRIAGED:
        return False

    company = current_app.config.get('COMPANY_NAME', '')
    subject, body = rejection_email(applicant, company, rejection_variant(applicant.raw_status))
    notify_email(applicant, org, applicant.email, subject, body, cc=_careers_address(org))
    applicant.rejection_sent_time = to_db(utcnow())
    applicant.sent_email_follow_up = True
    db.session.commit()
    current_app.logger.info('sent follow up email to %s', applicant.email)
    return True


def expand(applicant, org, has_workspace_record=False, storage=None, slack=None, now=None):
    """Fill the fields derived from what the applicant submitted."""
    if applicant.phone:
        phone, country_code = cleanup_phone(applicant.phone, applicant.location)
        applicant.phone = phone
        if not applicant.country_code:
            applicant.country_code = country_code
    if applicant.github and not applicant.github.startswith("@"):
        applicant.github, gitlab = parse_github_gitlab(applicant.github)
        applicant.gitlab = applicant.gitlab or gitlab
    if applicant.linkedin and not applicant.linkedin.startswith("https://linkedin.com/"):
        applicant.linkedin = cleanup_linkedin(applicant.linkedin)
    if has_workspace_record:
        base = current_app.config.get('APPLY_BASE_URL', '').rstrip('/')
        applicant.scoring_form_url = f"{base}/review/{applicant.email}"

    send_received_email(applicant, org, slack=slack)
    set_lat_long(applicant)
    if should_extract(applicant, now):
        extract_documents(applicant, storage)
    db.session.commit()
    return applicant
