from ..extensions import db
from .base import TimestampMixin


class Organization(db.Model, TimestampMixin):
    __tablename__ = "organizations"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)
    mail_domain = db.Column(db.String(120), default="")
    slack_channel_applicants = db.Column(db.String(120), default="#applicants")
    airtable_base_id = db.Column(db.String(64), default="")
    github_org = db.Column(db.String(120), default="")
    github_onboarding_repo = db.Column(db.String(120), default="configs")

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name!r}>"
