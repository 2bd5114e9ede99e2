from ..extensions import db
from .base import OrgScopedMixin, TimestampMixin


class Employee(db.Model, OrgScopedMixin, TimestampMixin):
    """Employee directory entry, seeded from a signed offer."""

    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(120), nullable=False)
    full_name = db.Column(db.String(200), default="")
    recovery_email = db.Column(db.String(254), index=True)
    home_address_street_1 = db.Column(db.String(255), default="")
    home_address_city = db.Column(db.String(120), default="")
    home_address_state = db.Column(db.String(120), default="")
    home_address_zipcode = db.Column(db.String(20), default="")
    home_address_country = db.Column(db.String(120), default="")
    start_date = db.Column(db.Date)

    @property
    def has_address(self):
        return bool((self.home_address_street_1 or "").strip())

    def __repr__(self) -> str:
        return f"<Employee id={self.id} username={self.username!r}>"
