import os
import sys
from datetime import date

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hirehub.errors import ConfigurationError, TransientIOError
from hirehub.jobs import refresh
from hirehub.jobs.interviews import sync_interviews, update_interviews_window
from hirehub.jobs.refresh import refresh_applicant, refresh_db_applicants, refresh_new_applicants_and_reviews
from hirehub.jobs.scoring import update_reviews_scoring
from hirehub.models import Applicant, ApplicantStatus, Notification

HEADER = [
    "Timestamp", "Name", "Email Address", "Location", "Phone Number", "GitHub Profile URL",
    "Resume", "Oxide Candidate Materials", "Status",
    "Sent email that we received their application", "Have sent follow up email",
]


def row(email, status="Next steps", timestamp="3/2/2020 10:00:00", received="TRUE", follow_up="TRUE"):
    return [timestamp, "Jane Doe", email, "San Francisco, CA", "(415) 555-0132",
            "github.com/JaneDoe", "", "", status, received, follow_up]


class FakeSheets:
    def __init__(self, values):
        self.values = values
        self.updates = []

    def get_values(self, sheet_id, a1_range):
        return self.values

    def update_cell(self, sheet_id, a1_cell, value):
        self.updates.append((sheet_id, a1_cell, value))


def test_rows_become_applicants(app, org, slack, workspace):
    app.config["HIRING_SHEETS"] = {"Software Engineer": "sheet-1"}
    sheets = FakeSheets([HEADER, row("jane@example.com"), row("bad@example.com", timestamp="last week"),
                         row("joe@example.com"), ["", "", ""], row("after@example.com")])

    assert refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack) == 2

    jane = Applicant.query.filter_by(email="jane@example.com").one()
    assert jane.status == ApplicantStatus.NEXT_STEPS
    assert jane.phone == "+1 415-555-0132"
    assert jane.country_code == "us"
    assert jane.github == "@janedoe"
    assert jane.workspace_record_id
    assert workspace.applicants.records[jane.workspace_record_id]["fields"]["status"] == "Next steps"
    assert Applicant.query.filter_by(email="bad@example.com").first() is None
    assert Applicant.query.filter_by(email="after@example.com").first() is None
    assert slack.messages == []

    # same rows again: nothing new, no notifications
    assert refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack) == 2
    assert Applicant.query.count() == 2
    assert len(workspace.applicants.records) == 2
    assert slack.messages == []


def test_sheet_status_change_notifies(app, org, slack, workspace):
    app.config["HIRING_SHEETS"] = {"Software Engineer": "sheet-1"}
    sheets = FakeSheets([HEADER, row("jane@example.com")])
    refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack)

    sheets.values = [HEADER, row("jane@example.com", status="Giving offer")]
    refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack)

    assert slack.updates == ["status is now `Giving offer`"]


def test_received_email_sent_and_written_back(app, org, slack, workspace, sent_emails):
    app.config["HIRING_SHEETS"] = {"Software Engineer": "sheet-1"}
    sheets = FakeSheets([HEADER, row("jane@example.com", status="", received="FALSE")])

    refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack)

    assert [m["to"] for m in sent_emails] == ["jane@example.com", "careers@example.com"]
    assert slack.updates == ["new application for Software Engineer"]
    assert sheets.updates == [("sheet-1", "J2", "TRUE")]
    assert Notification.query.filter_by(type="sendgrid").count() == 2

    refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack)
    assert len(sent_emails) == 2


def test_declined_applicant_gets_one_rejection(app, org, slack, workspace, sent_emails, make_applicant):
    applicant = make_applicant(sheet_id="", status=ApplicantStatus.NEXT_STEPS, sent_email_follow_up=False,
                               workspace_record_id="rec1")
    workspace.applicants.add("rec1", email="jane@example.com", sheet_id="",
                             status="Declined", raw_status="Declined: materials")

    refresh_applicant(applicant, org, workspace, slack=slack, today=date(2026, 10, 19))
    refresh_applicant(applicant, org, workspace, slack=slack, today=date(2026, 10, 19))

    assert applicant.status == ApplicantStatus.DECLINED
    assert applicant.sent_email_follow_up is True
    assert applicant.rejection_sent_time is not None
    assert len(sent_emails) == 1
    assert sent_emails[0]["cc"] == "careers@example.com"
    assert slack.updates == ["status is now `Declined`"]


def test_interview_window(app, org, workspace, make_applicant):
    applicant = make_applicant(workspace_record_id="rec1")
    workspace.interviews.add("int1", name="Technical", applicant=["rec1"], interviewers=["a@example.com"],
                             start_time="2026-10-05T16:00:00Z", end_time="2026-10-05T17:00:00Z")
    workspace.interviews.add("int2", name="Values", applicant=["rec1"], interviewers=["b@example.com"],
                             start_time="2026-10-07T16:00:00.1234567Z", end_time="2026-10-07T17:30:00Z")
    workspace.interviews.add("int3", name="Unscheduled", applicant=["rec1"])

    assert sync_interviews(org, workspace) == 2
    assert sync_interviews(org, workspace) == 2
    assert update_interviews_window(applicant)

    assert applicant.interviews_started.isoformat() == "2026-10-05T16:00:00"
    assert applicant.interviews_completed.isoformat() == "2026-10-07T17:30:00"


def test_workspace_status_edit_survives_the_sheet_pass(app, org, slack, workspace):
    app.config["HIRING_SHEETS"] = {"Software Engineer": "sheet-1"}
    sheets = FakeSheets([HEADER, row("jane@example.com")])
    refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack)
    jane = Applicant.query.filter_by(email="jane@example.com").one()
    fields = workspace.applicants.records[jane.workspace_record_id]["fields"]

    fields["status"] = "Giving offer"
    refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack)
    assert jane.status == ApplicantStatus.GIVING_OFFER
    assert fields["status"] == "Giving offer"

    # a later edit in the sheet still comes through
    sheets.values = [HEADER, row("jane@example.com", status="Declined: timing")]
    refresh_db_applicants(org, sheets=sheets, workspace=workspace, slack=slack)
    assert jane.status == ApplicantStatus.DECLINED
    assert fields["status"] == "Declined"
    assert slack.updates == ["status is now `Giving offer`", "status is now `Declined`"]


def test_web_applicant_counters_zeroed_at_onboarding(app, org, slack, workspace, make_applicant):
    applicant = make_applicant(sheet_id="", status=ApplicantStatus.ONBOARDING, start_date=date(2026, 12, 1),
                               scoring_evaluations_count=3, scoring_yes_count=2)

    refresh_applicant(applicant, org, workspace, slack=slack, today=date(2026, 10, 19))

    assert applicant.scoring_evaluations_count == 0
    assert applicant.scoring_yes_count == 0


def test_one_failing_applicant_does_not_stop_the_pass(app, org, slack, workspace, monkeypatch, make_applicant):
    broken = make_applicant(email="broken@example.com", name="Broken Applicant")
    ok = make_applicant(email="ok@example.com")

    def scoring(applicant, ws):
        if applicant.email == "broken@example.com":
            applicant.name = "Half Written"
            raise TransientIOError("workspace timed out")
        return update_reviews_scoring(applicant, ws)

    monkeypatch.setattr(refresh, "update_reviews_scoring", scoring)

    assert refresh_new_applicants_and_reviews(org, workspace=workspace, slack=slack) == 2

    assert broken.name == "Broken Applicant"
    assert not broken.workspace_record_id
    assert ok.workspace_record_id
    assert workspace.applicants.records[ok.workspace_record_id]["fields"]["email"] == "ok@example.com"


def test_configuration_error_aborts_the_pass(app, org, slack, workspace, monkeypatch, make_applicant):
    make_applicant(email="first@example.com")
    make_applicant(email="second@example.com")
    seen = []

    def scoring(applicant, ws):
        seen.append(applicant.email)
        raise ConfigurationError("workspace api key rejected")

    monkeypatch.setattr(refresh, "update_reviews_scoring", scoring)

    with pytest.raises(ConfigurationError):
        refresh_new_applicants_and_reviews(org, workspace=workspace, slack=slack)
    assert seen == ["first@example.com"]
