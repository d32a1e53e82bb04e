"""
Municipality Service - read-only access to the municipality directory.
"""

import logging
from typing import Dict, Iterable, List, Optional

from firebase_admin import firestore

from setshaba.utils.firestore_helpers import snapshot_to_dict

logger = logging.getLogger(__name__)

COLLECTION = "municipalities"


class MunicipalityService:
    """Reference data lookups. Nothing here writes."""

    def __init__(self, db):
        self.db = db

    def list_municipalities(self) -> List[Dict]:
        query = self.db.collection(COLLECTION).order_by("name", direction=firestore.Query.ASCENDING)
        return [snapshot_to_dict(doc) for doc in query.stream()]

    def get_municipality(self, municipality_id: Optional[str]) -> Optional[Dict]:
        if not municipality_id:
            return None
        return snapshot_to_dict(self.db.collection(COLLECTION).document(municipality_id).get())

    def exists(self, municipality_id: str) -> bool:
        return self.get_municipality(municipality_id) is not None

    def get_summaries(self, municipality_ids: Iterable[Optional[str]]) -> Dict[str, Dict]:
        """Fetch {id: {id, name, province}} for each distinct id."""
        summaries: Dict[str, Dict] = {}
        for municipality_id in {m for m in municipality_ids if m}:
            municipality = self.get_municipality(municipality_id)
            if municipality:
                summaries[municipality_id] = summarize(municipality)
        return summaries


def summarize(municipality: Dict) -> Dict:
    return {
        "id": municipality["id"],
        "name": municipality.get("name"),
        "province": municipality.get("province"),
    }
