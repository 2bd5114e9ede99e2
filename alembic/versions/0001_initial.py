"""Initial schema

Creates the hiring tables (organizations, applicants, applicant reviews and
interviews, employees, notifications) from the model metadata.

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    from hirehub.extensions import db
    import hirehub.models  # noqa: F401

    db.metadata.create_all(bind=bind, checkfirst=True)


def downgrade() -> None:
    bind = op.get_bind()
    from hirehub.extensions import db
    import hirehub.models  # noqa: F401

    db.metadata.drop_all(bind=bind)
