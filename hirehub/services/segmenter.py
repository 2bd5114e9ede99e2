"""Split candidate-materials text into named sample and question segments.

Patterns are literal phrases with two relaxations that survive PDF-to-text
noise: ``*`` matches a short run of any characters including newlines, and a
space matches any run of whitespace. A segment is the text strictly between
the end of its boundary's match and the start of the next boundary's match.
"""

import re
from dataclasses import dataclass

from flask import current_app, has_app_context

WILDCARD = "*"
WILDCARD_SPAN = 200


@dataclass(frozen=True)
class Boundary:
    label: str
    # candidate start patterns, tried in order
    patterns: tuple


def _literal(piece):
    words = piece.split()
    body = r"\s+".join(re.escape(w) for w in words)
    if not words:
        return r"\s*" if piece else ""
    if piece[0].isspace():
        body = r"\s+" + body
    if piece[-1].isspace():
        body = body + r"\s+"
    return body


def compile_pattern(pattern):
    gap = r"[\s\S]{0,%d}?" % WILDCARD_SPAN
    return re.compile(gap.join(_literal(p) for p in pattern.split(WILDCARD)))


def _find(pattern, text, pos=0):
    regex = compile_pattern(pattern)
    m = regex.search(text, pos)
    if m is None:
        return None
    # a wildcard can reach back to a stray letter well before the phrase;
    # keep the latest start that still ends in the same place
    while True:
        n = regex.search(text, m.start() + 1)
        if n is None or n.start() >= m.end() or n.end() > m.end():
            return m
        m = n


def _default_boilerplate():
    if has_app_context():
        return current_app.config.get('MATERIALS_BOILERPLATE') or ()
    return ()


def clean(segment, boilerplate=None):
    if boilerplate is None:
        boilerplate = _default_boilerplate()
    for b in boilerplate:
        segment = segment.replace(b, "")
    return re.sub(r"^[\s:]+", "", segment).strip()


def extract_between(text, start, end, boilerplate=None):
    """Text between the first ``start`` match and the next ``end`` match.

    An empty ``end`` runs to the end of the text. Returns "" when either side
    is missing.
    """
    if not text:
        return ""
    m = _find(start, text)
    if m is None:
        return ""
    if not end:
        return clean(text[m.end():], boilerplate)
    e = _find(end, text, m.end())
    if e is None:
        return ""
    return clean(text[m.end():e.start()], boilerplate)


def first_between(text, candidates, boilerplate=None):
    """Try ``(start, end)`` pairs in priority order; first non-empty wins."""
    for start, end in candidates:
        found = extract_between(text, start, end, boilerplate)
        if found:
            return found
    return ""


def _locate(text, boundary, pos):
    for pattern in boundary.patterns:
        m = _find(pattern, text, pos)
        if m is not None:
            return m
    return None


def segment(text, boundaries, boilerplate=None):
    """Map each boundary label to the text that follows it.

    The last boundary's segment runs to the end of the text. A boundary that
    cannot be found, or whose successor cannot be found, yields "".
    """
    out = {b.label: "" for b in boundaries}
    if not text:
        return out

    matches = []
    pos = 0
    for b in boundaries:
        m = _locate(text, b, pos)
        matches.append(m)
        if m is not None:
            pos = m.end()

    for i, b in enumerate(boundaries):
        m = matches[i]
        if m is None:
            continue
        if i + 1 == len(boundaries):
            out[b.label] = clean(text[m.end():], boilerplate)
            continue
        nxt = matches[i + 1]
        if nxt is None:
            continue
        out[b.label] = clean(text[m.end():nxt.start()], boilerplate)
    return out


SAMPLE_CANDIDATES = {
    "work_samples": (
        ("Work sample(s)", "Writing samples"),
        ("If*his work is entirely proprietary*please describe it as fully as y*can, providing necessary context.",
         "Writing samples"),
        ("What would you have done differently?", "Exploratory samples"),
        ("Some questions*o have in mind as you describe them:", "Exploratory samples"),
        ("Work samples", "Exploratory samples"),
        ("design sample(s)", "Questionnaire"),
    ),
    "writing_samples": (
        ("Writing sample(s)", "Analysis samples"),
        ("Please submit at least one writing sample (and no more tha*three) that you feel represent*you*"
         "providin*links if*necessary.", "Analysis samples"),
        ("Writing samples", "Analysis samples"),
        ("Writing sample(s)", "Code and/or design sample"),
    ),
    "analysis_samples": (
        ("Analysis sample(s)", "Presentation samples"),
        ("please recount a*incident*which you analyzed syste*misbehavior*including as much technical detail "
         "as you can recall.", "Presentation samples"),
        ("Analysis samples", "Presentation samples"),
    ),
    "presentation_samples": (
        ("Presentation sample(s)", "Questionnaire"),
        ("I*you don’t have a publicl*available presentation*pleas*describe a topic on which you have "
         "presented in th*past.", "Questionnaire"),
        ("Presentation samples", "Questionnaire"),
    ),
    "exploratory_samples": (
        ("Exploratory sample(s)", "Questionnaire"),
        ("What’s an example o*something that you needed to explore, reverse engineer, decipher or otherwise "
         "figure out a*part of a program or project and how did you do it? Please provide as much detail as "
         "you ca*recall.", "Questionnaire"),
        ("Exploratory samples", "Questionnaire"),
    ),
}


def question_boundaries(company):
    return (
        Boundary("question_technically_challenging",
                 ("W*at work*ave you found mos*challenging*caree*wh*?",)),
        Boundary("question_proud_of",
                 ("W*at work*ave you done that you*particularl*proud o*and why?",)),
        Boundary("question_happiest",
                 ("W*en have you been happiest in your professiona*caree*and why?",)),
        Boundary("question_unhappiest",
                 ("W*en have you been unhappiest in your professiona*caree*and why?",)),
        Boundary("question_value_reflected",
                 (f"F*r one of {company}*s values*describe an example of ho*it wa*reflected*particula*body*you*work.",)),
        Boundary("question_value_violated",
                 (f"F*r one of {company}*s values*describe an example of ho*it wa*violated*you*organization o*work.",)),
        Boundary("question_values_in_tension",
                 (f"F*r a pair of {company}*s values*describe a time in whic*the tw*values*tensio*for*your*"
                  "and how yo*resolved it.",)),
        Boundary("question_why",
                 (f"W*y*do*you*want*to*work*for*{company}?",)),
    )


def parse_materials(text, company=None, boilerplate=None):
    """Fill the five sample segments and eight question segments."""
    if company is None:
        company = current_app.config.get('COMPANY_NAME', 'Oxide') if has_app_context() else 'Oxide'
    out = {label: first_between(text, candidates, boilerplate)
           for label, candidates in SAMPLE_CANDIDATES.items()}
    out.update(segment(text, question_boundaries(company), boilerplate))
    return out
