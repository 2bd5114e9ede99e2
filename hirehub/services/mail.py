from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from flask import current_app


def send_email(to_email, subject, text, cc=None):
    sg = SendGridAPIClient(api_key=current_app.config['SENDGRID_API_KEY'])
    message = Mail(from_email=(current_app.config['MAIL_FROM'], current_app.config['MAIL_FROM_NAME']),
                   to_emails=to_email,
                   subject=subject,
                   plain_text_content=text)
    if cc:
        message.add_cc(cc)
    resp = sg.send(message)
    return resp.status_code, getattr(resp, 'headers', None)


def received_email(applicant, company):
    subject = f"{company} Computer Company: Application Received for {applicant.name}"
    body = (
        f"Dear {applicant.name},\n\n"
        f"Thank you for submitting your application materials! We really appreciate all the time "
        f"and thought everyone puts into their application. We will be in touch within the next "
        f"couple weeks with more information.\n\n"
        f"Sincerely,\n  The {company} Team"
    )
    return subject, body


def internal_notice(applicant):
    subject = f"New Application: {applicant.name}"
    body = (
        f"## Applicant Information - {applicant.role}\n\n"
        f"Submitted Date: {applicant.submitted_time}\n"
        f"Name: {applicant.name}\n"
        f"Email: {applicant.email}\n"
        f"Phone: {applicant.phone}\n"
        f"Location: {applicant.location}\n"
        f"GitHub: {applicant.github}\n"
        f"Resume: {applicant.resume}\n"
        f"Materials: {applicant.materials}\n"
    )
    return subject, body


_REJECTIONS = {
    "materials": (
        "We noticed you did not complete the candidate materials for your application. "
        "Our process depends heavily on them, so we are unable to move forward at this time. "
        "You are welcome to reapply with complete materials in the future."
    ),
    "junior": (
        "We are not currently hiring for junior roles, so we are unable to move forward with "
        "your application at this time. We hope you will consider applying again as your "
        "career progresses."
    ),
    "timing": (
        "After reviewing your materials we have decided not to move forward at this time. "
        "This is largely a question of timing and the roles we need to fill right now."
    ),
}


def rejection_variant(raw_status):
    s = (raw_status or "").lower()
    if "did not do materials" in s:
        return "materials"
    if "junior" in s:
        return "junior"
    return "timing"


def rejection_email(applicant, company, variant):
    subject = f"Thank you for your application, {applicant.name}"
    body = (
        f"Dear {applicant.name},\n\n"
        f"Thank you for your interest in {company}. {_REJECTIONS[variant]}\n\n"
        f"All the best,\n  The {company} Team"
    )
    return subject, body
