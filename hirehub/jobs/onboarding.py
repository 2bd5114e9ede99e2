from flask import current_app

from ..models.status import ApplicantStatus
from ..services.github_issues import IssueTracker

LABEL = "hiring"


def issue_title(applicant):
    return f"Onboarding: {applicant.name}"


def issue_body(applicant):
    return "\n".join([
        f"- [ ] Add {applicant.name} to the employee directory",
        f"- [ ] Create accounts for {applicant.email}",
        "- [ ] Order equipment and ship it before the start date",
        "- [ ] Schedule first-day orientation",
        "",
        f"Start date: {applicant.start_date.isoformat()}",
        f"Role: {applicant.role}",
    ])


def sync_onboarding_issue(applicant, org, tracker=None, issues=None):
    """Keep the onboarding checklist issue in line with the applicant's status.

    Returns the action taken: "created", "updated", "reopened", "closed" or None.
    """
    if applicant.start_date is None:
        return None
    tracker = tracker or IssueTracker.for_org(org)
    if issues is None:
        issues = tracker.list_issues(LABEL)
    title = issue_title(applicant)
    existing = next((i for i in issues if i.get("title") == title), None)

    if applicant.status != ApplicantStatus.ONBOARDING:
        if existing is not None and existing.get("state") == "open":
            tracker.comment(existing["number"],
                            f"Closing issue automatically since the applicant is now status: `{applicant.status}`")
            tracker.update_issue(existing["number"], state="closed")
            current_app.logger.info('closed onboarding issue for %s', applicant.email)
            return "closed"
        return None

    if existing is None:
        tracker.create_issue(title, issue_body(applicant), [LABEL])
        current_app.logger.info('created onboarding issue for %s', applicant.email)
        return "created"
    if existing.get("state") == "closed":
        tracker.update_issue(existing["number"], state="open", body=issue_body(applicant))
        return "reopened"
    # leave the body alone once someone has started checking things off
    if "[x]" not in (existing.get("body") or ""):
        tracker.update_issue(existing["number"], body=issue_body(applicant))
        return "updated"
    return None
