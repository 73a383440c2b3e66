"""Workflow model definition."""

from __future__ import annotations

from datetime import UTC, datetime

from ..extensions import db


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Workflow(db.Model):
    """Represents a stored RPA workflow definition."""

    __tablename__ = "rpa_workflows"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    steps_json = db.Column(db.Text, nullable=False)
    schedule_json = db.Column(db.Text, nullable=True)
    platform_connections_json = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(32), nullable=False, default="active")
    run_count = db.Column(db.Integer, nullable=False, default=0)
    last_run = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<Workflow {self.id} {self.name!r}>"
