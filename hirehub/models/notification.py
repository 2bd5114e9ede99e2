from ..extensions import db
from .base import OrgScopedMixin, TimestampMixin


class Notification(db.Model, OrgScopedMixin, TimestampMixin):
    """Log of every chat message and email sent about an applicant."""

    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    applicant_id = db.Column(db.Integer, db.ForeignKey("applicants.id"), index=True)
    type = db.Column(db.String(50))  # slack/sendgrid
    sent_to = db.Column(db.String(255))
    subject = db.Column(db.String(255))
    body = db.Column(db.Text)
    provider_message_id = db.Column(db.String(255))
    sent_at = db.Column(db.DateTime)
