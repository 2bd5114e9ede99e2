from flask import current_app

from ..errors import HireHubError
from .http import build_session, call

GEOCODE_API = "https://maps.googleapis.com/maps/api/geocode/json"


def geocode(location):
    """Return ``(lat, lng)`` for a free-text location, or None.

    Geocoding is best effort: every failure is logged and swallowed so a bad
    address never blocks reconciliation.
    """
    key = current_app.config.get('GOOGLE_GEOCODE_KEY')
    if not location or not key:
        return None
    try:
        r = call(build_session(), 'GET', GEOCODE_API, params={'address': location, 'key': key})
        results = r.json().get('results') or []
    except HireHubError as e:
        current_app.logger.warning('geocoding %r failed: %s', location, e)
        return None
    if not results:
        current_app.logger.warning('geocoding %r returned no results', location)
        return None
    loc = results[0].get('geometry', {}).get('location', {})
    return loc.get('lat', 0.0), loc.get('lng', 0.0)
