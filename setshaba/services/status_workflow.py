"""
Status Workflow - report status changes and their audit trail.

Officials may move a report to any status. Every change is appended to
``status_history``; the first move to RESOLVED stamps ``resolved_at``.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from firebase_admin import firestore

from setshaba.models.report import ReportStatus


class StatusWorkflowEngine:

    @staticmethod
    def create_status_history_entry(from_status: Optional[str], to_status: str, changed_by: str) -> Dict:
        # SERVER_TIMESTAMP cannot be used inside array values, so stamp locally.
        return {
            "from_status": from_status,
            "to_status": to_status,
            "changed_by": changed_by,
            "timestamp": datetime.now(timezone.utc),
        }

    @classmethod
    def initial_fields(cls, created_by: str) -> Dict:
        """Fields every new report starts with."""
        return {
            "status": ReportStatus.OPEN.value,
            "status_history": [
                cls.create_status_history_entry(None, ReportStatus.OPEN.value, created_by)
            ],
            "resolved_at": None,
        }

    @classmethod
    def transition_fields(cls, report: Dict, new_status: ReportStatus, changed_by: str) -> Dict:
        """
        Patch fields for moving ``report`` to ``new_status``.
        Returns an empty dict when the status is unchanged.
        """
        current = report.get("status")
        if current == new_status.value:
            return {}

        history = list(report.get("status_history") or [])
        history.append(cls.create_status_history_entry(current, new_status.value, changed_by))
        fields = {"status": new_status.value, "status_history": history}
        if new_status is ReportStatus.RESOLVED and not report.get("resolved_at"):
            fields["resolved_at"] = firestore.SERVER_TIMESTAMP
        return fields
