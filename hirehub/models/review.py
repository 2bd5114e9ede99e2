from ..extensions import db
from .base import OrgScopedMixin, TimestampMixin


class ApplicantReview(db.Model, OrgScopedMixin, TimestampMixin):
    """A reviewer's scoring form, mirrored from the workspace.

    Reviews are folded into the applicant's counters; once the applicant is
    onboarding they are deleted.
    """

    __tablename__ = "applicant_reviews"

    id = db.Column(db.Integer, primary_key=True)
    workspace_record_id = db.Column(db.String(64), unique=True, index=True)
    applicant_id = db.Column(db.Integer, db.ForeignKey("applicants.id"), index=True)
    reviewer = db.Column(db.String(254), nullable=False)
    evaluation = db.Column(db.String(255), default="")
    rationale = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text, default="")
    value_reflected = db.Column(db.String(120), default="")
    value_violated = db.Column(db.String(120), default="")
    values_in_tension = db.Column(db.JSON, default=list)

    def __repr__(self) -> str:
        return f"<ApplicantReview id={self.id} reviewer={self.reviewer!r}>"
