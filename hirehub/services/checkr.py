from flask import current_app

from ..errors import ConfigurationError
from .http import build_session, call

CHECKR_API = "https://api.checkr.com/v1"


class CheckrClient:
    def __init__(self, api_key):
        if not api_key:
            raise ConfigurationError("CHECKR_API_KEY is not set")
        self.session = build_session()
        self.session.auth = (api_key, '')

    @classmethod
    def from_config(cls):
        return cls(current_app.config.get('CHECKR_API_KEY'))

    def list_candidates(self):
        candidates = []
        url = f"{CHECKR_API}/candidates"
        while url:
            data = call(self.session, 'GET', url, params={'per_page': 100}).json()
            candidates.extend(data.get('data') or [])
            url = data.get('next_href')
        return candidates

    def get_candidate(self, candidate_id):
        return call(self.session, 'GET', f"{CHECKR_API}/candidates/{candidate_id}").json()

    def create_candidate(self, email):
        return call(self.session, 'POST', f"{CHECKR_API}/candidates", json={'email': email}).json()

    def create_invitation(self, candidate_id, package):
        body = {'candidate_id': candidate_id, 'package': package}
        return call(self.session, 'POST', f"{CHECKR_API}/invitations", json=body).json()

    def get_report(self, report_id):
        return call(self.session, 'GET', f"{CHECKR_API}/reports/{report_id}").json()
