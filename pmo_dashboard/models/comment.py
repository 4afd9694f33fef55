"""PMO comment thread entries attached to a project."""

from datetime import datetime, timezone

from pmo_dashboard.models import db


class Comment(db.Model):
    __tablename__ = "pmo_comments"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    comment_text = db.Column(db.String(1000), nullable=False)
    added_by = db.Column(db.String(100), nullable=False)
    added_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    project = db.relationship("Project", back_populates="comments")

    __table_args__ = (
        db.Index("ix_pmo_comments_added_at", "added_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "comment_text": self.comment_text,
            "added_by": self.added_by,
            "added_at": self.added_at.isoformat() if self.added_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
