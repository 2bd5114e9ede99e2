import json

from ..extensions import db
from ..models.notification import Notification
from ..services.mail import send_email
from ..services.slack import SlackClient, applicant_message
from ..utils.time import to_db, utcnow


def notify_chat(applicant, org, update, slack=None):
    """Post the applicant card with ``update`` to the org's applicants channel."""
    slack = slack or SlackClient.from_config()
    channel = org.slack_channel_applicants
    message = applicant_message(applicant, update)
    ts = slack.post_message(channel, message)
    n = Notification(org_id=org.id, applicant_id=applicant.id,
                     type="slack", sent_to=channel, subject=update,
                     body=json.dumps(message), provider_message_id=str(ts or ""),
                     sent_at=to_db(utcnow()))
    db.session.add(n); db.session.commit()
    return n.id


def notify_email(applicant, org, to_email, subject, body, cc=None):
    status, headers = send_email(to_email, subject, body, cc=cc)
    n = Notification(org_id=org.id, applicant_id=applicant.id,
                     type="sendgrid", sent_to=to_email, subject=subject,
                     body=body, provider_message_id=str(headers or ""),
                     sent_at=to_db(utcnow()))
    db.session.add(n); db.session.commit()
    return n.id
