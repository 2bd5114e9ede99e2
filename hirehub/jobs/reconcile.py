"""Merge the spreadsheet row, the database record and the workspace record
into one canonical applicant.

Each source is frozen into a read-only snapshot and every field is merged by
the rule declared for it in ``FIELD_RULES``. A few fields need cross-field
logic (status, scorers, counters); those run after the table.
"""

import enum
from datetime import date, datetime, timedelta, timezone
from types import MappingProxyType

from flask import current_app

from ..errors import ConfigurationError, DataIntegrityError
from ..models.applicant import COUNTER_FIELDS, QUESTION_FIELDS, SAMPLE_FIELDS, Applicant
from ..models.status import PRIVATE_STATUSES, ApplicantStatus
from ..utils.time import as_utc, to_db, utcnow
from .status import derive_status

# form timestamps are recorded in Pacific time without an offset
PACIFIC = timezone(timedelta(hours=-8))
TIMESTAMP_FORMAT = "%m/%d/%Y %H:%M:%S"
DATE_FORMAT = "%m/%d/%Y"

HEADER_KEYS = (
    ("timestamp", "timestamp"),
    ("name", "name"),
    ("email", "email address"),
    ("location", "location"),
    ("phone", "phone"),
    ("github", "github"),
    ("portfolio", "portfolio url"),
    ("website", "website"),
    ("linkedin", "linkedin profile url"),
    ("resume", "resume"),
    ("materials", "materials"),
    ("status", "status"),
    ("value_reflected", "value reflected"),
    ("value_violated", "value violated"),
    ("value_in_tension_1", "value in tension [1"),
    ("value_in_tension_2", "value in tension [2"),
    ("sent_email_received", "sent email that we received their application"),
    ("sent_email_follow_up", "have sent follow up email"),
    ("start_date", "start date"),
    ("interested_in", "job descriptions are you interested in"),
)
REQUIRED_COLUMNS = ("timestamp", "name", "email")

ROLE_ALIASES = {
    "product security engineer": "Product Security Engineer",
    "security engineer": "Product Security Engineer",
    "software engineer - security": "Product Security Engineer",
    "software engineer: web": "Software Engineer: Web",
    "software engineer: embedded systems": "Software Engineer: Embedded Systems",
    "software engineer: control plane": "Software Engineer: Control Plane",
    "hardware engineer": "Hardware Engineer",
}

_GITHUB_PREFIXES = (
    "https://github.com/", "http://github.com/", "https://www.github.com/",
    "http://www.github.com/", "www.github.com/", "github.com/",
)
_GITLAB_PREFIXES = ("https://gitlab.com/", "http://gitlab.com/", "gitlab.com/")
_LINKEDIN_PREFIXES = (
    "https://linkedin.com/", "https://www.linkedin.com/", "http://linkedin.com/",
    "http://www.linkedin.com/", "www.linkedin.com/", "linkedin.com/",
)


def parse_columns(header):
    """Locate the columns we use by substring of the header text.

    A later header matching the same key wins.
    """
    columns = {}
    for index, col in enumerate(header):
        c = (col or "").lower()
        for key, needle in HEADER_KEYS:
            if needle in c:
                columns[key] = index
    missing = [k for k in REQUIRED_COLUMNS if k not in columns]
    if missing:
        raise ConfigurationError(f"applicant sheet is missing columns: {', '.join(missing)}")
    return columns


def _cell(row, columns, key):
    index = columns.get(key)
    if index is None or index >= len(row):
        return ""
    return (row[index] or "").strip()


def _strip_prefixes(value, prefixes):
    for prefix in prefixes:
        if value.startswith(prefix):
            return value[len(prefix):]
    return value


def parse_github_gitlab(value):
    """Return ``(github, gitlab)`` handles, each ``@user`` or ""."""
    v = (value or "").strip().lower()
    if "gitlab.com" in v:
        user = _strip_prefixes(v, _GITLAB_PREFIXES).strip("/@ ")
        return "", (f"@{user}" if user else "")
    user = _strip_prefixes(v, _GITHUB_PREFIXES).replace("@", "").strip("/ ")
    handle = f"@{user}"
    if handle in ("@", "@n/a", "@none") or "linkedin.com" in handle:
        return "", ""
    return handle, ""


def cleanup_linkedin(value):
    v = (value or "").strip().lower()
    if v in ("", "n/a", "none"):
        return ""
    return "https://linkedin.com/" + _strip_prefixes(v, _LINKEDIN_PREFIXES).strip()


def clean_interested_in(value):
    return ROLE_ALIASES.get(value.strip().lower(), value.strip())


def parse_timestamp(value):
    try:
        return datetime.strptime(value.strip(), TIMESTAMP_FORMAT).replace(tzinfo=PACIFIC)
    except ValueError as e:
        raise DataIntegrityError(f"malformed form timestamp {value!r}") from e


def parse_sheet_date(value):
    if not value or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise DataIntegrityError(f"malformed date {value!r}") from e


def parse_row(role, sheet_id, columns, row):
    """Turn one form-response row into applicant fields."""
    raw_status = _cell(row, columns, "status")
    github, gitlab = parse_github_gitlab(_cell(row, columns, "github"))
    tension = [v.lower() for v in (_cell(row, columns, "value_in_tension_1"),
                                   _cell(row, columns, "value_in_tension_2")) if v]
    interested = [clean_interested_in(s) for s in _cell(row, columns, "interested_in").split(",")]
    return {
        "name": _cell(row, columns, "name"),
        "email": _cell(row, columns, "email"),
        "role": role,
        "sheet_id": sheet_id,
        "raw_status": raw_status,
        "status": ApplicantStatus.parse(raw_status),
        "submitted_time": to_db(parse_timestamp(_cell(row, columns, "timestamp"))),
        "phone": _cell(row, columns, "phone"),
        "location": _cell(row, columns, "location"),
        "github": github,
        "gitlab": gitlab,
        "linkedin": cleanup_linkedin(_cell(row, columns, "linkedin")),
        "portfolio": _cell(row, columns, "portfolio"),
        "website": _cell(row, columns, "website").lower(),
        "resume": _cell(row, columns, "resume"),
        "materials": _cell(row, columns, "materials"),
        "value_reflected": _cell(row, columns, "value_reflected").lower(),
        "value_violated": _cell(row, columns, "value_violated").lower(),
        "values_in_tension": sorted(tension),
        # an unset checkbox column reads as sent
        "sent_email_received": "false" not in _cell(row, columns, "sent_email_received").lower(),
        "sent_email_follow_up": "false" not in _cell(row, columns, "sent_email_follow_up").lower(),
        "start_date": parse_sheet_date(_cell(row, columns, "start_date")),
        "interested_in": [i for i in interested if i],
    }


class Rule(enum.Enum):
    PARSED = "parsed"                            # the row is authoritative
    EXISTING = "existing"                        # stored value if non-empty, else the row's
    WORKSPACE = "workspace"                      # workspace record, else stored, else the row's
    PARSED_ELSE_EXISTING = "parsed_else_existing"
    ANY = "any"                                  # flags: true if any source says so
    STORED = "stored"                            # only the database tracks it


FIELD_RULES = {
    "name": Rule.PARSED,
    "email": Rule.PARSED,
    "role": Rule.PARSED,
    "sheet_id": Rule.PARSED,
    "raw_status": Rule.PARSED,
    "submitted_time": Rule.PARSED,
    "phone": Rule.PARSED,
    "location": Rule.PARSED,
    "github": Rule.PARSED,
    "gitlab": Rule.PARSED,
    "linkedin": Rule.PARSED,
    "portfolio": Rule.PARSED,
    "website": Rule.PARSED,
    "resume": Rule.PARSED,
    "materials": Rule.PARSED,
    "interested_in": Rule.PARSED,
    "sent_email_received": Rule.ANY,
    "sent_email_follow_up": Rule.ANY,
    "start_date": Rule.PARSED_ELSE_EXISTING,
    "scorers": Rule.WORKSPACE,
    "interviews": Rule.WORKSPACE,
    "link_to_reviews": Rule.WORKSPACE,
    "scorers_completed": Rule.STORED,
    "workspace_record_id": Rule.WORKSPACE,
    "country_code": Rule.EXISTING,
    "latitude": Rule.EXISTING,
    "longitude": Rule.EXISTING,
    "resume_contents": Rule.EXISTING,
    "materials_contents": Rule.EXISTING,
    "interview_packet": Rule.EXISTING,
    "interviews_started": Rule.EXISTING,
    "interviews_completed": Rule.EXISTING,
    "rejection_sent_time": Rule.EXISTING,
    "value_reflected": Rule.EXISTING,
    "value_violated": Rule.EXISTING,
    "values_in_tension": Rule.EXISTING,
    "scoring_form_url": Rule.EXISTING,
    "criminal_background_check_status": Rule.EXISTING,
    "motor_vehicle_background_check_status": Rule.EXISTING,
    "offer_envelope_id": Rule.EXISTING,
    "offer_envelope_status": Rule.EXISTING,
    "offer_created_at": Rule.EXISTING,
    "offer_completed_at": Rule.EXISTING,
    "agreements_envelope_id": Rule.EXISTING,
    "agreements_envelope_status": Rule.EXISTING,
    "agreements_created_at": Rule.EXISTING,
    "agreements_completed_at": Rule.EXISTING,
}
FIELD_RULES.update({f: Rule.EXISTING for f in SAMPLE_FIELDS + QUESTION_FIELDS + COUNTER_FIELDS})

LIST_FIELDS = frozenset({"interested_in", "values_in_tension", "scorers", "scorers_completed",
                         "interviews", "link_to_reviews"})
_DEFAULTS = {f: 0 for f in COUNTER_FIELDS}
_DEFAULTS.update({f: [] for f in LIST_FIELDS})
_DEFAULTS.update({"latitude": 0.0, "longitude": 0.0,
                  "sent_email_received": False, "sent_email_follow_up": False})
_NONE_DEFAULT = frozenset({"submitted_time", "start_date", "interviews_started", "interviews_completed",
                           "rejection_sent_time", "offer_created_at", "offer_completed_at",
                           "agreements_created_at", "agreements_completed_at"})


def _default(field):
    if field in _NONE_DEFAULT:
        return None
    default = _DEFAULTS.get(field, "")
    return list(default) if isinstance(default, list) else default


def _freeze(value):
    if isinstance(value, list):
        return tuple(value)
    return value


def snapshot(source):
    """Read-only view of one source's fields."""
    if source is None:
        return MappingProxyType({})
    if isinstance(source, Applicant):
        data = {f: getattr(source, f) for f in list(FIELD_RULES) + ["status"]}
    elif "fields" in source:
        # workspace record
        data = dict(source.get("fields") or {})
        if source.get("id"):
            data.setdefault("workspace_record_id", source["id"])
    else:
        data = dict(source)
    return MappingProxyType({k: _freeze(v) for k, v in data.items()})


def _empty(value):
    return value is None or value == "" or value == () or value == 0 or value == 0.0


def _merge_field(field, rule, parsed, stored, workspace, has_workspace):
    if rule is Rule.PARSED:
        return parsed.get(field, stored.get(field))
    if rule is Rule.EXISTING:
        if not _empty(stored.get(field)):
            return stored.get(field)
        return parsed.get(field)
    if rule is Rule.WORKSPACE:
        if has_workspace:
            return workspace.get(field)
        if field in stored:
            return stored.get(field)
        return parsed.get(field)
    if rule is Rule.PARSED_ELSE_EXISTING:
        value = parsed.get(field)
        return stored.get(field) if value is None else value
    if rule is Rule.ANY:
        return bool(parsed.get(field)) or bool(stored.get(field))
    if rule is Rule.STORED:
        return stored.get(field)
    raise ValueError(f"no merge rule for {field}")


def _thaw(field, value):
    if value is None:
        return _default(field)
    if isinstance(value, tuple):
        return list(value)
    return value


def _workspace_edit(workspace, stored, field, parse):
    """The workspace value if a human changed it since it was last mirrored."""
    if not workspace.get(field):
        return None
    value = parse(workspace[field])
    return None if value == stored.get(field) else value


def _raw_status(fields, status):
    # a stale raw status is left behind when only the status cell was edited
    raw = fields.get("raw_status") or ""
    return raw if ApplicantStatus.parse(raw) == status else fields["status"]


def _keep_onboarding(previous, status):
    # the sheet and workspace still say Giving offer after the offer is signed
    if previous == ApplicantStatus.ONBOARDING and status == ApplicantStatus.GIVING_OFFER:
        return ApplicantStatus.ONBOARDING
    return status


def reconcile(parsed_row, existing_db_record=None, existing_workspace_record=None, today=None):
    """Return the canonical field values for one applicant.

    ``parsed_row`` comes from ``parse_row``; either existing record may be
    None. The result does not depend on how many times it has run before.
    """
    parsed = snapshot(parsed_row)
    stored = snapshot(existing_db_record)
    workspace = snapshot(existing_workspace_record)
    has_workspace = existing_workspace_record is not None

    out = {}
    for field, rule in FIELD_RULES.items():
        out[field] = _thaw(field, _merge_field(field, rule, parsed, stored, workspace, has_workspace))

    status = parsed.get("status") or ApplicantStatus.parse(parsed.get("raw_status"))
    edited = _workspace_edit(workspace, stored, "status", ApplicantStatus.parse)
    if edited is not None:
        status = edited
        out["raw_status"] = _raw_status(workspace, edited)
    edited = _workspace_edit(workspace, stored, "start_date", _ws_date)
    if edited is not None:
        out["start_date"] = edited
    status = _keep_onboarding(stored.get("status"), status)
    out["status"] = derive_status(status, len(out["interviews"]), out["start_date"], today)

    out["values_in_tension"] = sorted(out["values_in_tension"])
    out["scorers_completed"] = sorted(set(out["scorers_completed"]))
    out["scorers"] = [s for s in out["scorers"] if s not in out["scorers_completed"]]

    if out["status"] in PRIVATE_STATUSES:
        for f in COUNTER_FIELDS:
            out[f] = 0
    return out


def apply_fields(applicant, fields):
    for field, value in fields.items():
        setattr(applicant, field, value)
    return applicant


def should_extract(applicant, now=None):
    """Freshness gate for resume and materials extraction."""
    if applicant.status == ApplicantStatus.DECLINED:
        return False
    now = now or utcnow()
    age = now - as_utc(applicant.submitted_time)
    cfg = current_app.config
    if age < timedelta(days=cfg.get('EXTRACTION_FRESH_DAYS', 2)):
        return True
    return age < timedelta(days=cfg.get('EXTRACTION_STALE_DAYS', 20)) and not applicant.question_why


def _ws_date(value):
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise DataIntegrityError(f"malformed workspace date {value!r}") from e


def keep_fields_from_workspace(applicant, record):
    """Take the fields humans edit in the workspace.

    The workspace owns the review and interview links outright. Status and
    start date are copied too; since every pass mirrors them back, a
    difference here is a manual change.
    """
    if not record:
        return applicant
    fields = record.get("fields") or {}
    applicant.scorers = list(fields.get("scorers") or [])
    applicant.interviews = list(fields.get("interviews") or [])
    applicant.link_to_reviews = list(fields.get("link_to_reviews") or [])
    if fields.get("status"):
        status = _keep_onboarding(applicant.status, ApplicantStatus.parse(fields["status"]))
        if status != applicant.status:
            applicant.raw_status = _raw_status(fields, status)
        applicant.status = status
    elif "raw_status" in fields:
        applicant.raw_status = fields.get("raw_status") or ""
    if "start_date" in fields:
        applicant.start_date = _ws_date(fields.get("start_date"))
    return applicant
