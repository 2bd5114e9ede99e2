from urllib.parse import quote

from flask import current_app

from ..errors import ConfigurationError
from .http import build_session, call

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


class SheetsClient:
    def __init__(self, token):
        if not token:
            raise ConfigurationError("GOOGLE_API_TOKEN is not set")
        self.session = build_session(headers={'Authorization': f'Bearer {token}'})

    @classmethod
    def from_config(cls):
        return cls(current_app.config.get('GOOGLE_API_TOKEN'))

    def get_values(self, sheet_id, a1_range):
        r = call(self.session, 'GET', f"{SHEETS_API}/{sheet_id}/values/{quote(a1_range)}",
                 params={'majorDimension': 'ROWS'})
        return r.json().get('values') or []

    def update_cell(self, sheet_id, a1_cell, value):
        body = {'range': a1_cell, 'values': [[value]]}
        call(self.session, 'PUT', f"{SHEETS_API}/{sheet_id}/values/{quote(a1_cell)}",
             params={'valueInputOption': 'USER_ENTERED'}, json=body)


def column_letter(index):
    """0-based column index to an A1 column name."""
    name = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        name = chr(65 + rem) + name
    return name
