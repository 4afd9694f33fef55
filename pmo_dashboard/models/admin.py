"""
PMO Dashboard
Admin domain models.

Models:
    - ActivityLogEntry: append-only trail of admin mutations.
    - SystemSetting: free-form key/value store, upserted by key.
"""

from datetime import datetime, timezone

from pmo_dashboard.models import db


class ActivityLogEntry(db.Model):
    """One row per admin action. Rows are never updated or deleted by the API."""

    __tablename__ = "admin_activity_log"
    __table_args__ = (
        db.Index("idx_activity_ts", "timestamp"),
        db.Index("idx_activity_action", "action"),
    )

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(100), nullable=False)
    details = db.Column(db.Text, nullable=True)
    user_id = db.Column(db.Integer, nullable=True, comment="Acting user; no FK so entries survive user removal")
    ip_address = db.Column(db.String(45), nullable=True)
    timestamp = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "action": self.action,
            "details": self.details,
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


class SystemSetting(db.Model):
    __tablename__ = "system_settings"

    id = db.Column(db.Integer, primary_key=True)
    setting_key = db.Column(db.String(100), unique=True, nullable=False)
    setting_value = db.Column(db.Text, nullable=True)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "setting_key": self.setting_key,
            "setting_value": self.setting_value,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
