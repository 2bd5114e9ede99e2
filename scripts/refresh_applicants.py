"""Periodic refresh passes, meant for cron.

Usage:
  python scripts/refresh_applicants.py                 # every pass
  python scripts/refresh_applicants.py sheets envelopes

Passes run in order for every organization: sheets, reviews, envelopes,
background.
"""

import sys
import os

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from hirehub import create_app
from hirehub.jobs.background import refresh_background_checks
from hirehub.jobs.envelopes import refresh_envelopes
from hirehub.jobs.refresh import refresh_db_applicants, refresh_new_applicants_and_reviews
from hirehub.models.organization import Organization

PASSES = {
    'sheets': refresh_db_applicants,
    'reviews': refresh_new_applicants_and_reviews,
    'envelopes': refresh_envelopes,
    'background': refresh_background_checks,
}


def main(argv):
    names = argv or list(PASSES)
    unknown = [n for n in names if n not in PASSES]
    if unknown:
        print('unknown pass:', ', '.join(unknown), '(choose from', ', '.join(PASSES), ')')
        raise SystemExit(2)

    app = create_app()
    with app.app_context():
        for org in Organization.query.order_by(Organization.id).all():
            for name in names:
                print(f'{org.name}: {name}')
                PASSES[name](org)


if __name__ == '__main__':
    main(sys.argv[1:])
