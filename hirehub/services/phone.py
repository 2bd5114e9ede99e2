import phonenumbers
from flask import current_app, has_app_context

# (region, location keywords, required phone prefix)
# The first row whose keyword appears in the lowercased location, and whose
# prefix (if any) starts the digits, decides the region. Default is US.
DEFAULT_COUNTRY_HINTS = (
    ("GB", ("uk", "london", "ipswich", "united kingdom", "england"), "44"),
    ("CZ", ("czech republic", "prague"), "420"),
    ("TR", ("turkey",), "90"),
    ("SE", ("sweden",), "46"),
    ("IN", ("mumbai", "india", "bangalore"), "91"),
    ("BR", ("brazil",), None),
    ("BE", ("belgium",), None),
    ("RO", ("romania",), "40"),
    ("NG", ("nigeria",), None),
    ("AT", ("austria",), None),
    ("AU", ("australia",), "61"),
    ("LK", ("sri lanka",), "94"),
    ("SI", ("slovenia",), "386"),
    ("FR", ("france",), "33"),
    ("NL", ("netherlands",), "31"),
    ("TW", ("taiwan",), None),
    ("NZ", ("new zealand",), None),
    ("IT", ("maragno", "italy"), None),
    ("KE", ("nairobi", "kenya"), None),
    ("AE", ("dubai",), None),
    ("PL", ("poland",), None),
    ("PT", ("portugal",), None),
    ("DE", ("berlin", "germany"), None),
    ("BJ", ("benin",), "229"),
    ("IL", ("israel",), None),
    ("ES", ("spain",), None),
)


def _hints():
    if has_app_context():
        configured = current_app.config.get('PHONE_COUNTRY_HINTS')
        if configured:
            return [(r, tuple(k), p) for r, k, p in configured]
    return DEFAULT_COUNTRY_HINTS


def strip_phone(phone):
    for ch in (" ", "-", "+", "(", ")", "."):
        phone = phone.replace(ch, "")
    return phone


def guess_region(digits, location, hints=None):
    """Return ``(region, matched_prefix)`` for a phone given the applicant's location."""
    loc = (location or "").lower()
    for region, keywords, prefix in (hints or _hints()):
        if not any(k in loc for k in keywords):
            continue
        if prefix and not digits.startswith(prefix):
            continue
        return region, prefix
    return "US", None


def cleanup_phone(phone, location, hints=None):
    """Normalize a phone number.

    Returns ``(formatted_phone, country_code)``; country_code is the
    lowercased ISO region. Numbers that cannot be parsed are returned with
    only the punctuation stripped.
    """
    digits = strip_phone(phone or "")
    if not digits:
        return "", ""
    region, prefix = guess_region(digits, location, hints)
    candidate = f"+{digits}" if prefix else digits
    try:
        parsed = phonenumbers.parse(candidate, region)
    except phonenumbers.NumberParseException:
        if has_app_context():
            current_app.logger.info('could not parse phone %r for location %r', phone, location)
        return digits, region.lower()

    if not phonenumbers.is_valid_number(parsed) and has_app_context():
        current_app.logger.info('phone number %r is not valid for %s', phone, region)
    formatted = phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.INTERNATIONAL)
    return formatted, region.lower()
