from flask import current_app

from ..errors import ConfigurationError
from .http import build_session, call

GITHUB_API = "https://api.github.com"


class IssueTracker:
    def __init__(self, token, owner, repo):
        if not (token and owner and repo):
            raise ConfigurationError("GITHUB_TOKEN and the organization's onboarding repo must be set")
        self.url = f"{GITHUB_API}/repos/{owner}/{repo}/issues"
        self.session = build_session(headers={
            'Authorization': f'Bearer {token}',
            'Accept': 'application/vnd.github+json',
        })

    @classmethod
    def for_org(cls, org):
        return cls(current_app.config.get('GITHUB_TOKEN'), org.github_org, org.github_onboarding_repo)

    def list_issues(self, label):
        issues = []
        page = 1
        while True:
            batch = call(self.session, 'GET', self.url,
                         params={'labels': label, 'state': 'all', 'per_page': 100, 'page': page}).json()
            issues.extend(batch)
            if len(batch) < 100:
                return issues
            page += 1

    def create_issue(self, title, body, labels):
        return call(self.session, 'POST', self.url, json={'title': title, 'body': body, 'labels': labels}).json()

    def update_issue(self, number, **fields):
        return call(self.session, 'PATCH', f"{self.url}/{number}", json=fields).json()

    def comment(self, number, body):
        return call(self.session, 'POST', f"{self.url}/{number}/comments", json={'body': body}).json()
