"""Run record model definition."""

from __future__ import annotations

from ..extensions import db


class WorkflowRun(db.Model):
    """A finalized workflow run. Rows are inserted once and never updated."""

    __tablename__ = "rpa_runs"

    # Insertion order; history queries sort on this column.
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    run_id = db.Column(db.String(64), unique=True, nullable=False)
    # No foreign key: history outlives deleted workflows.
    workflow_id = db.Column(db.String(64), nullable=False, index=True)
    workflow_name = db.Column(db.String(255), nullable=False)
    status = db.Column(
        db.Enum("running", "completed", "completed_with_errors", "failed", name="rpa_run_status"),
        nullable=False,
    )
    start_time = db.Column(db.DateTime(timezone=True), nullable=False)
    end_time = db.Column(db.DateTime(timezone=True), nullable=True)
    total_steps = db.Column(db.Integer, nullable=False)
    completed_steps = db.Column(db.Integer, nullable=False, default=0)
    failed_steps = db.Column(db.Integer, nullable=False, default=0)
    error = db.Column(db.Text, nullable=True)
    options_json = db.Column(db.Text, nullable=False, default="{}")
    steps_json = db.Column(db.Text, nullable=False, default="[]")

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<WorkflowRun {self.run_id} {self.status}>"
