from flask import Blueprint, current_app, request

from ..extensions import rq
from ..jobs.handlers import (
    handle_background_check_request,
    handle_background_report,
    handle_envelope_update,
    handle_workspace_applicant_update,
)

bp = Blueprint("webhooks", __name__)


def _accept(handler):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return {"error": "expected a JSON object"}, 400
    rq.enqueue(handler, payload)
    current_app.logger.info('accepted %s for %s', request.path, handler.__name__)
    return {"ok": True}, 202


@bp.post("/docusign/envelope/update")
def docusign_envelope_update():
    return _accept(handle_envelope_update)


@bp.post("/checkr/background/update")
def checkr_background_update():
    return _accept(handle_background_report)


@bp.post("/airtable/applicants/update")
def airtable_applicants_update():
    return _accept(handle_workspace_applicant_update)


@bp.post("/airtable/applicants/request_background_check")
def airtable_request_background_check():
    return _accept(handle_background_check_request)
