from flask import current_app

from ..errors import ConfigurationError, ProviderError
from ..utils.time import human_ago
from .http import build_session, call

SLACK_API = "https://slack.com/api"


class SlackClient:
    def __init__(self, token):
        if not token:
            raise ConfigurationError("SLACK_TOKEN is not set")
        self.session = build_session(headers={'Authorization': f'Bearer {token}'})

    @classmethod
    def from_config(cls):
        return cls(current_app.config.get('SLACK_TOKEN'))

    def post_message(self, channel, message):
        """Post ``message`` (a dict of text/blocks/attachments) and return its ts."""
        payload = dict(message, channel=channel)
        r = call(self.session, 'POST', f"{SLACK_API}/chat.postMessage", json=payload)
        data = r.json()
        if not data.get('ok'):
            raise ProviderError(f"slack chat.postMessage: {data.get('error')}")
        return data.get('ts', '')


def _mrkdwn(text):
    return {"type": "mrkdwn", "text": text}


def _info_links(a):
    links = []
    if a.resume:
        links.append(f"<{a.resume}|resume>")
    if a.materials:
        links.append(f"<{a.materials}|materials>")
    if a.phone:
        links.append(f"<tel:{a.phone}|{a.phone}>")
    if a.github:
        links.append(f"<https://github.com/{a.github.lstrip('@')}|github:{a.github}>")
    if a.gitlab:
        links.append(f"<https://gitlab.com/{a.gitlab.lstrip('@')}|gitlab:{a.gitlab}>")
    if a.linkedin:
        links.append(f"<{a.linkedin}|linkedin>")
    if a.portfolio:
        links.append(f"<{a.portfolio}|portfolio>")
    if a.website:
        links.append(f"<{a.website}|website>")
    return " | ".join(links)


def _values_line(a):
    values = []
    if a.value_reflected:
        values.append(f"values reflected: {a.value_reflected}")
    if a.value_violated:
        values.append(f"violated: {a.value_violated}")
    for v in a.values_in_tension or []:
        values.append(f"in tension: {v}")
    return " | ".join(values) or "values not yet populated"


def applicant_message(a, update=None, now=None):
    """Chat card for an applicant; ``update`` becomes the second block."""
    intro = f"*{a.name}*  <mailto:{a.email}|{a.email}>"
    if a.location:
        intro += f"  {a.location}"

    status_line = a.role or ""
    if a.interested_in:
        status_line += " | " + ", ".join(a.interested_in)
    status_line += f" | *{a.status}*"
    if a.submitted_time:
        status_line += f" | applied {human_ago(a.submitted_time, now)}"

    blocks = [{"type": "section", "text": _mrkdwn(intro)}]
    info = _info_links(a)
    if info:
        blocks.append({"type": "context", "elements": [_mrkdwn(info)]})
    blocks.append({"type": "context", "elements": [_mrkdwn(_values_line(a))]})
    blocks.append({"type": "context", "elements": [_mrkdwn(status_line.strip(" |"))]})
    if update:
        blocks.insert(1, {"type": "section", "text": _mrkdwn(update)})

    return {
        "text": update or f"{a.name} applied for {a.role}",
        "attachments": [{"color": a.status.color, "blocks": blocks}],
    }
