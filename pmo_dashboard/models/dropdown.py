"""
Dropdown option model.

The option categories are a closed enumeration shared by the request
validator and the storage schema; unknown categories cannot be stored.
"""

import enum
from datetime import datetime, timezone

from pmo_dashboard.models import db


class DropdownType(str, enum.Enum):
    ACCOUNT_MANAGERS = "account_managers"
    STATUSES = "statuses"
    PHASES = "phases"
    PRIORITIES = "priorities"
    END_MONTHS = "end_months"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


# Project column each category feeds; used for the in-use check on delete.
DROPDOWN_PROJECT_FIELDS = {
    DropdownType.ACCOUNT_MANAGERS: "account_manager",
    DropdownType.STATUSES: "status",
    DropdownType.PHASES: "current_phase",
    DropdownType.PRIORITIES: "priority",
    DropdownType.END_MONTHS: "end_month",
}


class DropdownOption(db.Model):
    __tablename__ = "dropdown_options"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(
        db.Enum(
            DropdownType,
            name="dropdown_type",
            native_enum=False,
            validate_strings=True,
            length=50,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    value = db.Column(db.String(255), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("type", "value", name="uq_dropdown_type_value"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value if self.type else None,
            "value": self.value,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
