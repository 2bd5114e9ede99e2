"""Client for the shared workspace base humans edit by hand.

Records come back as ``{"id": ..., "fields": {...}}``; field names in the
workspace are the same snake_case names the applicant model uses.
"""

from flask import current_app

from ..errors import ConfigurationError
from .http import build_session, call

AIRTABLE_API = "https://api.airtable.com/v0"
APPLICANTS_TABLE = "Applicants"
REVIEWS_TABLE = "Reviews"
INTERVIEWS_TABLE = "Interviews"


class WorkspaceTable:
    def __init__(self, session, base_id, table):
        self.session = session
        self.url = f"{AIRTABLE_API}/{base_id}/{table}"

    def get(self, record_id):
        return call(self.session, 'GET', f"{self.url}/{record_id}").json()

    def find(self, formula=None):
        records = []
        params = {}
        if formula:
            params['filterByFormula'] = formula
        while True:
            data = call(self.session, 'GET', self.url, params=params).json()
            records.extend(data.get('records') or [])
            offset = data.get('offset')
            if not offset:
                return records
            params['offset'] = offset

    def upsert(self, fields, record_id=None):
        if record_id:
            r = call(self.session, 'PATCH', f"{self.url}/{record_id}", json={'fields': fields, 'typecast': True})
        else:
            r = call(self.session, 'POST', self.url, json={'fields': fields, 'typecast': True})
        return r.json()

    def delete(self, record_id):
        call(self.session, 'DELETE', f"{self.url}/{record_id}")


class Workspace:
    def __init__(self, api_key, base_id):
        if not (api_key and base_id):
            raise ConfigurationError("AIRTABLE_API_KEY and the organization's workspace base must be set")
        self.base_id = base_id
        self.session = build_session(headers={'Authorization': f'Bearer {api_key}'})

    @classmethod
    def for_org(cls, org):
        return cls(current_app.config.get('AIRTABLE_API_KEY'), org.airtable_base_id)

    def table(self, name):
        return WorkspaceTable(self.session, self.base_id, name)

    @property
    def applicants(self):
        return self.table(APPLICANTS_TABLE)

    @property
    def reviews(self):
        return self.table(REVIEWS_TABLE)

    @property
    def interviews(self):
        return self.table(INTERVIEWS_TABLE)
