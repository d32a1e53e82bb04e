"""
Report service - business logic for the citizen report lifecycle.
Handles Firestore CRUD operations for reports.

Lifecycle:
- created by a citizen (status OPEN, municipality fixed at creation)
- listed by its author, or by officials of its municipality
- updated (status, assignment, category) by officials of its municipality
- upvoted by other citizens (see vote_service)
"""

import logging
from typing import Dict, List, Optional

from firebase_admin import firestore

from setshaba.core.errors import InvalidAssignment, NotFound, UnresolvableLocation, ValidationFailed
from setshaba.models.report import ReportCreate, ReportStatus, ReportUpdate
from setshaba.models.user import CurrentUser
from setshaba.services.access_control import (
    ensure_can_view_report,
    ensure_same_tenant,
    resolve_official_scope,
)
from setshaba.services.geocoding import MunicipalityResolver
from setshaba.services.municipality_service import MunicipalityService
from setshaba.services.status_workflow import StatusWorkflowEngine
from setshaba.services.user_service import UserService, summarize_user
from setshaba.services.vote_service import VoteService
from setshaba.utils.firestore_helpers import count_matches, snapshot_to_dict, where_filter

logger = logging.getLogger(__name__)

COLLECTION = "reports"


class ReportService:

    def __init__(self, db, resolver: Optional[MunicipalityResolver] = None):
        self.db = db
        self.resolver = resolver
        self.municipalities = MunicipalityService(db)
        self.users = UserService(db)
        self.votes = VoteService(db)

    # -- reads -------------------------------------------------------------

    def _get_report_doc(self, report_id: str) -> Dict:
        report = snapshot_to_dict(self.db.collection(COLLECTION).document(report_id).get())
        if report is None:
            raise NotFound("Report not found")
        return report

    def get_report(self, caller: CurrentUser, report_id: str) -> Dict:
        """
        Single report. Existence is checked before ownership: a missing id is
        NotFound, someone else's report is Forbidden.
        """
        report = self._get_report_doc(report_id)
        ensure_can_view_report(caller, report)
        return self._join([report], with_author=True, with_assignee=True)[0]

    def list_my_reports(
        self,
        caller: CurrentUser,
        status: Optional[ReportStatus] = None,
        category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict:
        query = where_filter(self.db.collection(COLLECTION), "created_by", "==", caller.id)
        return self._page(query, status, category, limit, offset, with_author=False, with_assignee=False)

    def list_municipality_reports(
        self,
        caller: CurrentUser,
        municipality_id: Optional[str] = None,
        status: Optional[ReportStatus] = None,
        category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict:
        scope = resolve_official_scope(caller, municipality_id)
        query = where_filter(self.db.collection(COLLECTION), "municipality_id", "==", scope)
        return self._page(query, status, category, limit, offset, with_author=True, with_assignee=True)

    def _page(self, query, status, category, limit, offset, with_author, with_assignee) -> Dict:
        if status is not None:
            query = where_filter(query, "status", "==", status.value)
        if category:
            query = where_filter(query, "category", "==", category)

        total = count_matches(query)
        ordered = (
            query.order_by("created_at", direction=firestore.Query.DESCENDING)
            .offset(offset)
            .limit(limit)
        )
        reports = [snapshot_to_dict(doc) for doc in ordered.stream()]
        return {
            "items": self._join(reports, with_author=with_author, with_assignee=with_assignee),
            "total": total,
            "limit": limit,
            "offset": offset,
        }

    def _join(self, reports: List[Dict], with_author: bool, with_assignee: bool) -> List[Dict]:
        """Attach municipality/author/assignee summaries and the upvote count."""
        municipalities = self.municipalities.get_summaries(r.get("municipality_id") for r in reports)

        user_ids = set()
        if with_author:
            user_ids.update(r.get("created_by") for r in reports)
        if with_assignee:
            user_ids.update(r.get("assigned_official") for r in reports)
        users = {uid: summarize_user(self.users.get_user(uid)) for uid in user_ids if uid}
        upvotes = self.votes.count_upvotes_for(r["id"] for r in reports)

        joined = []
        for report in reports:
            item = dict(report)
            item["municipality"] = municipalities.get(report.get("municipality_id"))
            if with_author:
                item["created_by_user"] = users.get(report.get("created_by"))
            if with_assignee:
                item["assigned_official_user"] = users.get(report.get("assigned_official"))
            item["upvote_count"] = upvotes.get(report["id"], 0)
            joined.append(item)
        return joined

    # -- writes ------------------------------------------------------------

    def create_report(self, caller: CurrentUser, data: ReportCreate) -> Dict:
        """
        Create a report owned by ``caller``.

        The municipality is the caller's own, or resolved from the report's
        coordinates; it is stored once and never re-derived. Nothing is
        written when it cannot be determined.
        """
        municipality_id = caller.municipality_id
        if not municipality_id and self.resolver is not None:
            municipality_id = self.resolver.resolve(self.db, data.lat, data.lng)
        if not municipality_id:
            raise UnresolvableLocation()

        doc_ref = self.db.collection(COLLECTION).document()
        report = {
            "title": data.title,
            "description": data.description,
            "category": data.category,
            "lat": data.lat,
            "lng": data.lng,
            "address": data.address,
            "photo_url": data.photo_url,
            "municipality_id": municipality_id,
            "created_by": caller.id,
            "assigned_official": None,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": firestore.SERVER_TIMESTAMP,
            **StatusWorkflowEngine.initial_fields(caller.id),
        }
        doc_ref.set(report)
        logger.info(f"Report created: {doc_ref.id} by {caller.id} in municipality {municipality_id}")

        created = self._get_report_doc(doc_ref.id)
        return self._join([created], with_author=True, with_assignee=False)[0]

    def update_report(self, caller: CurrentUser, report_id: str, data: ReportUpdate) -> Dict:
        """
        Apply an official's partial update.

        Order: NotFound, then tenant check (Forbidden), then assignment check
        (InvalidAssignment). The assignee must be an official of the
        report's municipality. Nothing is written if any check fails.
        """
        report = self._get_report_doc(report_id)
        ensure_same_tenant(caller, report.get("municipality_id"))

        # null only means something for assigned_official, where it clears the assignment
        patch = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "assigned_official"
        }
        if not patch:
            raise ValidationFailed("No updatable fields supplied")

        fields: Dict = {}
        if "assigned_official" in patch:
            assignee = patch["assigned_official"]
            if assignee is not None and self.users.get_official_in_municipality(assignee, report["municipality_id"]) is None:
                logger.warning(f"Invalid assignment: report={report_id} assignee={assignee} by {caller.id}")
                raise InvalidAssignment()
            fields["assigned_official"] = assignee

        if "category" in patch:
            fields["category"] = patch["category"]

        if "status" in patch:
            fields.update(StatusWorkflowEngine.transition_fields(report, data.status, caller.id))

        fields["updated_at"] = firestore.SERVER_TIMESTAMP
        self.db.collection(COLLECTION).document(report_id).update(fields)
        logger.info(f"Report updated: {report_id} by {caller.id} fields={sorted(fields)}")

        updated = self._get_report_doc(report_id)
        return self._join([updated], with_author=True, with_assignee=True)[0]
