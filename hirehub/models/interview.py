from ..extensions import db
from .base import OrgScopedMixin, TimestampMixin


class ApplicantInterview(db.Model, OrgScopedMixin, TimestampMixin):
    __tablename__ = "applicant_interviews"

    id = db.Column(db.Integer, primary_key=True)
    # OrgScopedMixin: org_id
    workspace_record_id = db.Column(db.String(64), unique=True, index=True)
    name = db.Column(db.String(255), default="")
    # workspace record ids of the applicants in this interview
    applicant = db.Column(db.JSON, default=list)
    interviewers = db.Column(db.JSON, default=list)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<ApplicantInterview id={self.id} start={self.start_time}>"
