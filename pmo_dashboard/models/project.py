"""Project domain models: the full PMO project record and its simplified variant."""

from datetime import datetime, timezone

from pmo_dashboard.models import db


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class Project(db.Model):
    """One tracked customer project on the PMO board."""

    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(255), nullable=True)
    project_name = db.Column(db.String(255), nullable=False)
    account_manager = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(100), nullable=True)
    current_phase = db.Column(db.String(255), nullable=True)
    priority = db.Column(db.String(50), nullable=True)
    end_month = db.Column(
        db.String(50), nullable=True,
        comment="Month key shown on the board, e.g. Oct'26",
    )
    status2 = db.Column(
        db.String(100), nullable=True,
        comment="Delivery status: In Development | Done | ...",
    )
    pmo_comments = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    comments = db.relationship(
        "Comment", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        db.Index("ix_projects_updated_at", "updated_at"),
        db.Index("ix_projects_status", "status"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "project_name": self.project_name,
            "account_manager": self.account_manager,
            "status": self.status,
            "current_phase": self.current_phase,
            "priority": self.priority,
            "end_month": self.end_month,
            "status2": self.status2,
            "pmo_comments": self.pmo_comments,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Project {self.id}: {self.project_name}>"


class SimpleProject(db.Model):
    """Lightweight month/status tracker, independent of ``projects``."""

    __tablename__ = "simple_projects"

    id = db.Column(db.Integer, primary_key=True)
    project = db.Column(db.String(255), nullable=False)
    month = db.Column(db.String(10), nullable=True)
    status = db.Column(db.String(100), nullable=True)
    comments = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project": self.project,
            "month": self.month,
            "status": self.status,
            "comments": self.comments,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
