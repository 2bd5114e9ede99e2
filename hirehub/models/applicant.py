from ..extensions import db
from .base import OrgScopedMixin, TimestampMixin
from .status import ApplicantStatus

SAMPLE_FIELDS = (
    "work_samples",
    "writing_samples",
    "analysis_samples",
    "presentation_samples",
    "exploratory_samples",
)

QUESTION_FIELDS = (
    "question_technically_challenging",
    "question_proud_of",
    "question_happiest",
    "question_unhappiest",
    "question_value_reflected",
    "question_value_violated",
    "question_values_in_tension",
    "question_why",
)

COUNTER_FIELDS = (
    "scoring_evaluations_count",
    "scoring_enthusiastic_yes_count",
    "scoring_yes_count",
    "scoring_pass_count",
    "scoring_no_count",
    "scoring_not_applicable_count",
    "scoring_insufficient_experience_count",
    "scoring_inapplicable_experience_count",
    "scoring_job_function_yet_needed_count",
    "scoring_underwhelming_materials_count",
)


class Applicant(db.Model, OrgScopedMixin, TimestampMixin):
    __tablename__ = "applicants"
    __table_args__ = (db.UniqueConstraint("email", "sheet_id", name="uq_applicants_email_sheet"),)

    id = db.Column(db.Integer, primary_key=True)
    # OrgScopedMixin: org_id
    workspace_record_id = db.Column(db.String(64), index=True)

    # identity
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(254), nullable=False, index=True)
    role = db.Column(db.String(120), nullable=False, default="")
    # empty for applicants who came in through the web form
    sheet_id = db.Column(db.String(120), nullable=False, default="")
    status = db.Column(
        db.Enum(ApplicantStatus, native_enum=False, length=40,
                values_callable=lambda e: [m.value for m in e]),
        nullable=False, default=ApplicantStatus.NEEDS_TO_BE_TRIAGED, index=True)
    raw_status = db.Column(db.String(255), default="")
    submitted_time = db.Column(db.DateTime, nullable=False)

    # contact
    phone = db.Column(db.String(60), default="")
    country_code = db.Column(db.String(8), default="")
    location = db.Column(db.String(255), default="")
    latitude = db.Column(db.Float, default=0.0)
    longitude = db.Column(db.Float, default=0.0)
    github = db.Column(db.String(120), default="")
    gitlab = db.Column(db.String(120), default="")
    linkedin = db.Column(db.String(255), default="")
    portfolio = db.Column(db.String(500), default="")
    website = db.Column(db.String(500), default="")
    interested_in = db.Column(db.JSON, default=list)

    # application documents (storage references) and their extracted text
    resume = db.Column(db.String(500), default="")
    materials = db.Column(db.String(500), default="")
    resume_contents = db.Column(db.Text, default="")
    materials_contents = db.Column(db.Text, default="")
    work_samples = db.Column(db.Text, default="")
    writing_samples = db.Column(db.Text, default="")
    analysis_samples = db.Column(db.Text, default="")
    presentation_samples = db.Column(db.Text, default="")
    exploratory_samples = db.Column(db.Text, default="")
    question_technically_challenging = db.Column(db.Text, default="")
    question_proud_of = db.Column(db.Text, default="")
    question_happiest = db.Column(db.Text, default="")
    question_unhappiest = db.Column(db.Text, default="")
    question_value_reflected = db.Column(db.Text, default="")
    question_value_violated = db.Column(db.Text, default="")
    question_values_in_tension = db.Column(db.Text, default="")
    question_why = db.Column(db.Text, default="")

    # emails
    sent_email_received = db.Column(db.Boolean, default=False, nullable=False)
    sent_email_follow_up = db.Column(db.Boolean, default=False, nullable=False)
    rejection_sent_time = db.Column(db.DateTime)

    # values as judged by reviewers
    value_reflected = db.Column(db.String(120), default="")
    value_violated = db.Column(db.String(120), default="")
    values_in_tension = db.Column(db.JSON, default=list)

    # interviews and reviews; ids point at workspace records
    interview_packet = db.Column(db.String(500), default="")
    interviews = db.Column(db.JSON, default=list)
    interviews_started = db.Column(db.DateTime)
    interviews_completed = db.Column(db.DateTime)
    scorers = db.Column(db.JSON, default=list)
    scorers_completed = db.Column(db.JSON, default=list)
    link_to_reviews = db.Column(db.JSON, default=list)
    scoring_form_url = db.Column(db.String(500), default="")

    scoring_evaluations_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_enthusiastic_yes_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_yes_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_pass_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_no_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_not_applicable_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_insufficient_experience_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_inapplicable_experience_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_job_function_yet_needed_count = db.Column(db.Integer, default=0, nullable=False)
    scoring_underwhelming_materials_count = db.Column(db.Integer, default=0, nullable=False)

    # onboarding
    criminal_background_check_status = db.Column(db.String(60), default="")
    motor_vehicle_background_check_status = db.Column(db.String(60), default="")
    start_date = db.Column(db.Date)

    offer_envelope_id = db.Column(db.String(64), default="", index=True)
    offer_envelope_status = db.Column(db.String(40), default="")
    offer_created_at = db.Column(db.DateTime)
    offer_completed_at = db.Column(db.DateTime)
    agreements_envelope_id = db.Column(db.String(64), default="", index=True)
    agreements_envelope_status = db.Column(db.String(40), default="")
    agreements_created_at = db.Column(db.DateTime)
    agreements_completed_at = db.Column(db.DateTime)

    def counters(self):
        return {f: getattr(self, f) or 0 for f in COUNTER_FIELDS}

    def __repr__(self) -> str:
        return f"<Applicant id={self.id} email={self.email!r} status={self.status}>"
