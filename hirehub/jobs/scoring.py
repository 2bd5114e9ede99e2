from flask import current_app

from ..errors import NotFoundError
from ..extensions import db
from ..models.applicant import COUNTER_FIELDS
from ..models.review import ApplicantReview
from ..models.status import PRIVATE_STATUSES

# matched against the lowercased evaluation, first prefix wins
EVALUATION_PREFIXES = (
    ("emphatic yes:", "scoring_enthusiastic_yes_count"),
    ("yes:", "scoring_yes_count"),
    ("pass:", "scoring_pass_count"),
    ("no:", "scoring_no_count"),
    ("n/a:", "scoring_not_applicable_count"),
)
RATIONALE_PREFIXES = (
    ("insufficient experience", "scoring_insufficient_experience_count"),
    ("inapplicable experience", "scoring_inapplicable_experience_count"),
    ("job function not yet needed", "scoring_job_function_yet_needed_count"),
    ("underwhelming materials", "scoring_underwhelming_materials_count"),
)


def _as_list(value):
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _store_review(applicant, record_id, fields):
    review = ApplicantReview.query.filter_by(workspace_record_id=record_id).first()
    if review is None:
        review = ApplicantReview(org_id=applicant.org_id, workspace_record_id=record_id)
        db.session.add(review)
    review.applicant_id = applicant.id
    review.reviewer = fields.get("reviewer") or ""
    review.evaluation = fields.get("evaluation") or ""
    review.rationale = _as_list(fields.get("rationale"))
    review.notes = fields.get("notes") or ""
    review.value_reflected = (fields.get("value_reflected") or "").lower()
    review.value_violated = (fields.get("value_violated") or "").lower()
    review.values_in_tension = sorted(v.lower() for v in _as_list(fields.get("values_in_tension")))
    return review


def _fold_values(applicant, fields):
    if fields.get("value_reflected"):
        applicant.value_reflected = fields["value_reflected"].lower()
    if fields.get("value_violated"):
        applicant.value_violated = fields["value_violated"].lower()
    tension = _as_list(fields.get("values_in_tension"))
    if tension:
        applicant.values_in_tension = sorted(v.lower() for v in tension)


def update_reviews_scoring(applicant, workspace):
    """Re-derive the scoring counters from the applicant's linked reviews.

    Once the applicant is onboarding or hired the counters are zeroed and the
    reviews themselves are deleted, keeping only the values they named.
    """
    links = list(applicant.link_to_reviews or [])
    if not links:
        # no linked reviews means nothing to count
        stale = [f for f in COUNTER_FIELDS if getattr(applicant, f)]
        if not stale:
            return False
        for f in stale:
            setattr(applicant, f, 0)
        db.session.commit()
        return True

    private = applicant.status in PRIVATE_STATUSES
    counters = {f: 0 for f in COUNTER_FIELDS}
    completed = set(applicant.scorers_completed or [])

    for record_id in links:
        try:
            record = workspace.reviews.get(record_id)
        except NotFoundError:
            current_app.logger.warning('review %s for %s no longer exists', record_id, applicant.email)
            continue
        fields = record.get("fields") or {}
        _fold_values(applicant, fields)
        if private:
            continue

        _store_review(applicant, record_id, fields)
        counters["scoring_evaluations_count"] += 1
        evaluation = (fields.get("evaluation") or "").strip().lower()
        for prefix, counter in EVALUATION_PREFIXES:
            if evaluation.startswith(prefix):
                counters[counter] += 1
                break
        for rationale in _as_list(fields.get("rationale")):
            r = rationale.strip().lower()
            for prefix, counter in RATIONALE_PREFIXES:
                if r.startswith(prefix):
                    counters[counter] += 1
        if fields.get("reviewer"):
            completed.add(fields["reviewer"])

    for f, v in counters.items():
        setattr(applicant, f, v)
    applicant.scorers_completed = sorted(completed)
    applicant.scorers = [s for s in (applicant.scorers or []) if s not in completed]

    if private:
        for record_id in links:
            try:
                workspace.reviews.delete(record_id)
            except NotFoundError:
                pass
            ApplicantReview.query.filter_by(workspace_record_id=record_id).delete()
        applicant.link_to_reviews = []
        current_app.logger.info('deleted %d reviews for %s', len(links), applicant.email)

    db.session.commit()
    return True
