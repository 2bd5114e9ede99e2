import os
import sys
from datetime import date, datetime, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hirehub.errors import ConfigurationError, DataIntegrityError
from hirehub.extensions import db
from hirehub.jobs.reconcile import (
    apply_fields,
    keep_fields_from_workspace,
    parse_columns,
    parse_github_gitlab,
    parse_row,
    reconcile,
    should_extract,
)
from hirehub.models import Applicant, ApplicantStatus

TODAY = date(2026, 10, 19)

HEADER = [
    "Timestamp", "Name", "Email Address", "Location", "Phone Number", "GitHub Profile URL",
    "Portfolio URL", "Website", "LinkedIn Profile URL", "Resume", "Oxide Candidate Materials",
    "Status", "Value reflected", "Value violated", "Value in tension [1]", "Value in tension [2]",
    "Sent email that we received their application", "Have sent follow up email", "Start date",
    "Which job descriptions are you interested in?",
]
COLUMNS = parse_columns(HEADER)


def make_row(status="", start_date="", sent_received="TRUE", sent_follow_up="FALSE"):
    return [
        "10/1/2026 9:30:00", "Jane Doe", "jane@example.com", "London, UK", "+44 20 7946 0958",
        "https://github.com/JaneDoe/", "", "https://Jane.example.com", "https://www.linkedin.com/in/janedoe",
        "https://drive.google.com/open?id=r1", "https://drive.google.com/open?id=m1", status,
        "Rigor", "", "Urgency", "Candor", sent_received, sent_follow_up, start_date,
        "Software Engineer: Web, hardware engineer",
    ]


def parsed(**kwargs):
    return parse_row("Software Engineer", "sheet-1", COLUMNS, make_row(**kwargs))


def test_parse_row(app):
    p = parsed(status="Next steps: schedule")

    assert p["status"] == ApplicantStatus.NEXT_STEPS
    assert p["raw_status"] == "Next steps: schedule"
    assert p["submitted_time"] == datetime(2026, 10, 1, 17, 30)
    assert p["github"] == "@janedoe"
    assert p["gitlab"] == ""
    assert p["linkedin"] == "https://linkedin.com/in/janedoe"
    assert p["website"] == "https://jane.example.com"
    assert p["value_reflected"] == "rigor"
    assert p["values_in_tension"] == ["candor", "urgency"]
    assert p["sent_email_received"] is True
    assert p["sent_email_follow_up"] is False
    assert p["start_date"] is None
    assert p["interested_in"] == ["Software Engineer: Web", "Hardware Engineer"]


def test_parse_row_rejects_malformed_timestamp():
    row = make_row()
    row[0] = "yesterday"
    with pytest.raises(DataIntegrityError):
        parse_row("Software Engineer", "sheet-1", COLUMNS, row)


def test_parse_columns_requires_email():
    with pytest.raises(ConfigurationError):
        parse_columns(["Timestamp", "Name", "Location"])


def test_parse_github_gitlab():
    assert parse_github_gitlab("https://gitlab.com/Jane") == ("", "@jane")
    assert parse_github_gitlab("N/A") == ("", "")
    assert parse_github_gitlab("@jane") == ("@jane", "")


def test_new_applicant_from_row_only(app):
    out = reconcile(parsed(status=""), None, None, today=TODAY)

    assert out["status"] == ApplicantStatus.NEEDS_TO_BE_TRIAGED
    assert out["name"] == "Jane Doe"
    assert out["scorers"] == []
    assert out["resume_contents"] == ""
    assert out["workspace_record_id"] == ""
    assert out["scoring_yes_count"] == 0


def test_offer_in_sheet_does_not_regress_onboarding(app, make_applicant):
    existing = make_applicant(status=ApplicantStatus.ONBOARDING)
    out = reconcile(parsed(status="Giving offer"), existing, None, today=TODAY)
    assert out["status"] == ApplicantStatus.ONBOARDING


def test_sheet_status_wins_otherwise(app, make_applicant):
    existing = make_applicant(status=ApplicantStatus.NEXT_STEPS)
    out = reconcile(parsed(status="Declined: timing"), existing, None, today=TODAY)
    assert out["status"] == ApplicantStatus.DECLINED


def test_workspace_edit_beats_sheet(app, make_applicant):
    existing = make_applicant(status=ApplicantStatus.NEXT_STEPS, start_date=None)
    record = {"id": "rec1", "fields": {"status": "Giving offer", "raw_status": "Giving offer: verbal yes",
                                       "start_date": "2026-12-01"}}
    out = reconcile(parsed(status="Next steps"), existing, record, today=TODAY)

    assert out["status"] == ApplicantStatus.GIVING_OFFER
    assert out["raw_status"] == "Giving offer: verbal yes"
    assert out["start_date"] == date(2026, 12, 1)


def test_unedited_workspace_status_follows_sheet(app, make_applicant):
    existing = make_applicant(status=ApplicantStatus.NEXT_STEPS)
    record = {"id": "rec1", "fields": {"status": "Next steps"}}
    out = reconcile(parsed(status="Declined: timing"), existing, record, today=TODAY)
    assert out["status"] == ApplicantStatus.DECLINED


def test_workspace_offer_does_not_regress_onboarding(app, make_applicant):
    existing = make_applicant(status=ApplicantStatus.ONBOARDING)
    record = {"id": "rec1", "fields": {"status": "Giving offer"}}
    assert reconcile(parsed(status="Giving offer"), existing, record, today=TODAY)["status"] == ApplicantStatus.ONBOARDING

    applicant = make_applicant(email="joe@example.com", status=ApplicantStatus.ONBOARDING)
    keep_fields_from_workspace(applicant, record)
    assert applicant.status == ApplicantStatus.ONBOARDING


def test_two_interviews_move_to_interviewing(app):
    record = {"id": "rec1", "fields": {"interviews": ["i1", "i2"]}}
    out = reconcile(parsed(status="Next steps"), None, record, today=TODAY)
    assert out["status"] == ApplicantStatus.INTERVIEWING
    assert out["workspace_record_id"] == "rec1"


def test_start_date_reached_is_hired(app):
    out = reconcile(parsed(status="Onboarding", start_date="10/19/2026"), None, None, today=TODAY)
    assert out["status"] == ApplicantStatus.HIRED
    assert out["start_date"] == TODAY


def test_start_date_falls_back_to_stored(app, make_applicant):
    existing = make_applicant(start_date=date(2026, 11, 2))
    assert reconcile(parsed(), existing, None, today=TODAY)["start_date"] == date(2026, 11, 2)
    assert reconcile(parsed(start_date="12/01/2026"), existing, None, today=TODAY)["start_date"] == date(2026, 12, 1)


def test_existing_extraction_is_kept(app, make_applicant):
    existing = make_applicant(resume_contents="old resume text", question_why="The mission.",
                              value_reflected="candor", country_code="gb")
    out = reconcile(parsed(), existing, None, today=TODAY)

    assert out["resume_contents"] == "old resume text"
    assert out["question_why"] == "The mission."
    assert out["value_reflected"] == "candor"
    assert out["country_code"] == "gb"


def test_sent_flags_stay_set(app, make_applicant):
    existing = make_applicant(sent_email_received=True, sent_email_follow_up=True)
    out = reconcile(parsed(sent_received="FALSE", sent_follow_up="FALSE"), existing, None, today=TODAY)
    assert out["sent_email_received"] is True
    assert out["sent_email_follow_up"] is True


def test_workspace_scorers_exclude_completed(app, make_applicant):
    existing = make_applicant(scorers_completed=["b@example.com"], scorers=["old@example.com"])
    record = {"id": "rec9", "fields": {"scorers": ["a@example.com", "b@example.com"],
                                       "link_to_reviews": ["rev1"]}}
    out = reconcile(parsed(status="Next steps"), existing, record, today=TODAY)

    assert out["scorers"] == ["a@example.com"]
    assert out["scorers_completed"] == ["b@example.com"]
    assert out["link_to_reviews"] == ["rev1"]
    assert not set(out["scorers"]) & set(out["scorers_completed"])


def test_counters_zeroed_in_private_statuses(app, make_applicant):
    existing = make_applicant(status=ApplicantStatus.ONBOARDING, scoring_evaluations_count=3,
                              scoring_yes_count=2)
    out = reconcile(parsed(status="Onboarding"), existing, None, today=TODAY)

    assert out["scoring_evaluations_count"] == 0
    assert out["scoring_yes_count"] == 0


def test_reconcile_is_idempotent(app, org):
    record = {"id": "rec1", "fields": {"scorers": ["a@example.com"], "interviews": ["i1"]}}
    first = reconcile(parsed(status="Next steps"), None, record, today=TODAY)

    applicant = apply_fields(Applicant(org_id=org.id), first)
    db.session.add(applicant)
    db.session.commit()

    second = reconcile(parsed(status="Next steps"), applicant, record, today=TODAY)
    assert second == first


def test_reconcile_does_not_mutate_inputs(app):
    row = parsed(status="Next steps")
    record = {"id": "rec1", "fields": {"scorers": ["a@example.com"]}}
    reconcile(row, None, record, today=TODAY)
    assert record == {"id": "rec1", "fields": {"scorers": ["a@example.com"]}}
    assert row["values_in_tension"] == ["candor", "urgency"]


def test_should_extract(app, make_applicant):
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    fresh = make_applicant(email="fresh@example.com", submitted_time=datetime(2026, 10, 18, 12, 0))
    pending = make_applicant(email="pending@example.com", submitted_time=datetime(2026, 10, 9, 12, 0))
    done = make_applicant(email="done@example.com", submitted_time=datetime(2026, 10, 9, 12, 0),
                          question_why="The mission.")
    stale = make_applicant(email="stale@example.com", submitted_time=datetime(2026, 9, 1, 12, 0))
    declined = make_applicant(email="no@example.com", submitted_time=datetime(2026, 10, 18, 12, 0),
                              status=ApplicantStatus.DECLINED)

    assert should_extract(fresh, now=now)
    assert should_extract(pending, now=now)
    assert not should_extract(done, now=now)
    assert not should_extract(stale, now=now)
    assert not should_extract(declined, now=now)


def test_keep_fields_from_workspace(app, make_applicant):
    applicant = make_applicant(sheet_id="")
    record = {"id": "rec1", "fields": {"status": "Declined", "raw_status": "Declined: timing",
                                       "start_date": "2026-11-02", "scorers": ["a@example.com"]}}
    keep_fields_from_workspace(applicant, record)

    assert applicant.status == ApplicantStatus.DECLINED
    assert applicant.raw_status == "Declined: timing"
    assert applicant.start_date == date(2026, 11, 2)
    assert applicant.scorers == ["a@example.com"]
