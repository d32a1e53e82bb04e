"""
Upvote Service - per-user upvote toggling on reports.

An upvote is a document at report_upvotes/{report_id}_{user_id}. The
deterministic id is the uniqueness constraint: ``create()`` is atomic on the
store and fails with AlreadyExists for a duplicate pair. Presence of the
document means "upvoted"; nothing else is recorded.
"""

import logging
from typing import Dict, Iterable

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists

from setshaba.core.errors import NotFound, SelfUpvoteForbidden
from setshaba.models.user import CurrentUser
from setshaba.utils.firestore_helpers import count_matches, where_filter

logger = logging.getLogger(__name__)

COLLECTION = "report_upvotes"
REPORTS_COLLECTION = "reports"

# Firestore caps the values of an "in" filter at 30
IN_FILTER_LIMIT = 30


def upvote_id(report_id: str, user_id: str) -> str:
    return f"{report_id}_{user_id}"


class VoteService:
    """Service for managing upvotes on reports."""

    def __init__(self, db):
        self.db = db

    def count_upvotes(self, report_id: str) -> int:
        query = where_filter(self.db.collection(COLLECTION), "report_id", "==", report_id)
        return count_matches(query)

    def count_upvotes_for(self, report_ids: Iterable[str]) -> Dict[str, int]:
        """
        Upvote counts for many reports, one query per IN_FILTER_LIMIT ids
        instead of one aggregation per report. Reads every upvote document of
        the batch, so it suits listing pages rather than heavily upvoted sets.
        """
        ids = list(dict.fromkeys(r for r in report_ids if r))
        counts = {report_id: 0 for report_id in ids}
        for start in range(0, len(ids), IN_FILTER_LIMIT):
            chunk = ids[start:start + IN_FILTER_LIMIT]
            query = where_filter(self.db.collection(COLLECTION), "report_id", "in", chunk)
            for doc in query.stream():
                counts[doc.get("report_id")] += 1
        return counts

    def has_upvoted(self, report_id: str, user_id: str) -> bool:
        return self.db.collection(COLLECTION).document(upvote_id(report_id, user_id)).get().exists

    def toggle_upvote(self, caller: CurrentUser, report_id: str) -> Dict:
        """
        Flip the caller's upvote on a report.

        Checks, first failure wins:
        1. report exists                      -> NotFound
        2. caller is not the report's author  -> SelfUpvoteForbidden
        Then deletes an existing upvote, or creates one. A concurrent create
        that loses the race means the upvote already exists, which is the
        outcome the caller asked for.
        """
        report = self.db.collection(REPORTS_COLLECTION).document(report_id).get()
        if not report.exists:
            raise NotFound("Report not found")

        if report.get("created_by") == caller.id:
            raise SelfUpvoteForbidden()

        upvote_ref = self.db.collection(COLLECTION).document(upvote_id(report_id, caller.id))

        if upvote_ref.get().exists:
            upvote_ref.delete()
            upvoted = False
            logger.info(f"Upvote removed: report={report_id} user={caller.id}")
        else:
            try:
                upvote_ref.create({
                    "report_id": report_id,
                    "user_id": caller.id,
                    "created_at": firestore.SERVER_TIMESTAMP,
                })
                logger.info(f"Upvote added: report={report_id} user={caller.id}")
            except AlreadyExists:
                logger.info(f"Concurrent upvote already recorded: report={report_id} user={caller.id}")
            upvoted = True

        return {"upvoted": upvoted, "upvote_count": self.count_upvotes(report_id)}
