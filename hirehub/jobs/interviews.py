from ..extensions import db
from ..models.interview import ApplicantInterview
from ..utils.time import parse_provider_time, to_db


def sync_interviews(org, workspace):
    """Mirror the workspace's interview schedule into the database."""
    count = 0
    for record in workspace.interviews.find():
        fields = record.get("fields") or {}
        start, end = fields.get("start_time"), fields.get("end_time")
        if not (start and end):
            continue
        row = ApplicantInterview.query.filter_by(workspace_record_id=record["id"]).first()
        if row is None:
            row = ApplicantInterview(org_id=org.id, workspace_record_id=record["id"])
            db.session.add(row)
        row.name = fields.get("name") or ""
        row.applicant = list(fields.get("applicant") or [])
        row.interviewers = list(fields.get("interviewers") or [])
        row.start_time = to_db(parse_provider_time(start))
        row.end_time = to_db(parse_provider_time(end))
        count += 1
    db.session.commit()
    return count


def update_interviews_window(applicant):
    """Set when the applicant's interviews started and, for a loop, finished."""
    if not applicant.workspace_record_id:
        return False
    rows = (ApplicantInterview.query
            .filter_by(org_id=applicant.org_id)
            .order_by(ApplicantInterview.start_time)
            .all())
    mine = [r for r in rows if applicant.workspace_record_id in (r.applicant or [])]
    if not mine:
        return False
    applicant.interviews_started = mine[0].start_time
    if len(mine) > 1:
        applicant.interviews_completed = mine[-1].end_time
    db.session.commit()
    return True
