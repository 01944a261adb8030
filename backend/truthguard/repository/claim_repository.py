import logging
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError
from typing import List

from truthguard.models.claim import Claim, Scope, VerifiedRecord

logger = logging.getLogger(__name__)


class ClaimRepository:
    """Repository for verified claim records in MongoDB"""

    def __init__(self, collection: Collection):
        """
        Initialize the repository with a MongoDB collection

        Args:
            collection: MongoDB collection for verified claims
        """
        self.collection = collection
        # A title is processed at most once, across every scope
        self.collection.create_index("title", unique=True)
        self.collection.create_index([("scope", 1), ("created_at", DESCENDING)])

    def filter_new(self, claims: List[Claim]) -> List[Claim]:
        """
        Drop claims whose exact title is already persisted.

        Matching is case-sensitive with no normalization. Duplicates inside
        the incoming batch are kept; the unique index settles those on insert.

        Args:
            claims: Candidate claims from the source acquirer

        Returns:
            Claims not yet recorded, in their original order
        """
        if not claims:
            return []

        titles = list({claim.title for claim in claims})
        existing = {
            doc["title"]
            for doc in self.collection.find({"title": {"$in": titles}}, {"title": 1, "_id": 0})
        }
        fresh = [claim for claim in claims if claim.title not in existing]
        logger.info(f"[Repository] {len(fresh)}/{len(claims)} claims are new")
        return fresh

    def persist(self, record: VerifiedRecord) -> bool:
        """
        Append a verified record.

        Args:
            record: Claim merged with its verdict

        Returns:
            True if inserted, False if the title was already stored
        """
        try:
            self.collection.insert_one(record.to_document())
            logger.info(f"[Repository] Saved record: {record.title[:50]}...")
            return True
        except DuplicateKeyError:
            logger.warning(f"[Repository] Duplicate title skipped: {record.title[:50]}...")
            return False

    def count_by_scope(self, scope: Scope) -> int:
        return self.collection.count_documents({"scope": scope.value})

    def get_recent(self, scope: Scope, limit: int = 20) -> List[VerifiedRecord]:
        """
        Get the newest records for a scope.

        Args:
            scope: Local or Global partition
            limit: Page size

        Returns:
            Records sorted by creation time, newest first
        """
        cursor = (
            self.collection.find({"scope": scope.value}, {"_id": 0})
            .sort("created_at", DESCENDING)
            .limit(limit)
        )
        return [VerifiedRecord.model_validate(doc) for doc in cursor]

    def find_by_source(self, source_label: str) -> List[dict]:
        return list(self.collection.find({"source_label": source_label}))

    def delete_by_source(self, source_label: str) -> int:
        """Delete every record produced from the given source, returning the count."""
        result = self.collection.delete_many({"source_label": source_label})
        return result.deleted_count
