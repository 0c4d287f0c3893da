"""
Document Store - history of generated documents per user.

Every NVIS, Bill of Sale and saved VIN label is one record in the
`generated_documents` collection. Reads and deletes are always scoped to
the owning user.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
import logging

from database import database
from models import (
    DocumentAnalyticsDay,
    GeneratedDocument,
    HistoryDocumentType,
)

logger = logging.getLogger(__name__)

ANALYTICS_DAYS = 30

_ANALYTICS_FIELDS = {
    HistoryDocumentType.NVIS.value: "nvis",
    HistoryDocumentType.BILL_OF_SALE.value: "bill_of_sale",
    HistoryDocumentType.VIN_LABEL.value: "vin_label",
}


def _as_utc(value: datetime) -> datetime:
    # Mongo returns naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DocumentStore:
    """CRUD and analytics over the generated document history."""

    def _get_db(self):
        return database.get_db()

    async def add_generated_document(
        self,
        user_id: str,
        document_type: str,
        vin: str,
        content: str,
        image_data_uri: Optional[str] = None,
    ) -> str:
        """Persist a generated document and return its id."""
        if not user_id:
            raise ValueError("user_id is required")

        document = GeneratedDocument(
            user_id=user_id,
            document_type=document_type,
            vin=vin,
            content=content,
            image_data_uri=image_data_uri,
        )
        await self._get_db().generated_documents.insert_one(document.model_dump())

        logger.info(f"Saved {document_type} {document.document_id} for user {user_id}")
        return document.document_id

    async def list_documents_for_user(self, user_id: str, limit: int = 500) -> List[GeneratedDocument]:
        """Newest first."""
        cursor = self._get_db().generated_documents.find(
            {"user_id": user_id},
            {"_id": 0},
        ).sort("created_at", -1).limit(limit)
        records = await cursor.to_list(length=limit)
        return [GeneratedDocument(**r) for r in records]

    async def get_document(self, user_id: str, document_id: str) -> GeneratedDocument:
        record = await self._get_db().generated_documents.find_one(
            {"document_id": document_id},
            {"_id": 0},
        )
        if not record:
            raise LookupError("Document not found.")
        if record.get("user_id") != user_id:
            logger.warning(
                f"User {user_id} attempted to read document {document_id} owned by another user"
            )
            raise PermissionError("You do not have permission to access this document.")
        return GeneratedDocument(**record)

    async def delete_document(self, user_id: str, document_id: str) -> dict:
        """Delete one document owned by `user_id`.

        Raises:
            LookupError: no such document.
            PermissionError: the document belongs to someone else.
        """
        db = self._get_db()
        record = await db.generated_documents.find_one(
            {"document_id": document_id},
            {"_id": 0, "user_id": 1},
        )
        if not record:
            raise LookupError("Document not found.")

        if record.get("user_id") != user_id:
            logger.warning(
                f"Unauthorized delete attempt: user {user_id} on document {document_id}"
            )
            raise PermissionError("You do not have permission to delete this document.")

        await db.generated_documents.delete_one({"document_id": document_id, "user_id": user_id})
        logger.info(f"Deleted document {document_id} for user {user_id}")
        return {"success": True}

    async def delete_documents_for_user(self, user_id: str) -> int:
        result = await self._get_db().generated_documents.delete_many({"user_id": user_id})
        return result.deleted_count

    async def count_documents(self) -> int:
        return await self._get_db().generated_documents.count_documents({})

    async def get_user_analytics(
        self,
        user_id: str,
        days: int = ANALYTICS_DAYS,
        now: Optional[datetime] = None,
    ) -> List[DocumentAnalyticsDay]:
        """Per-day document counts for the last `days` days, oldest first."""
        now = now or datetime.now(timezone.utc)
        today = now.date()
        start_day = today - timedelta(days=days - 1)
        since = datetime(start_day.year, start_day.month, start_day.day, tzinfo=timezone.utc)

        buckets = {}
        for offset in range(days):
            day = (start_day + timedelta(days=offset)).isoformat()
            buckets[day] = DocumentAnalyticsDay(date=day)

        cursor = self._get_db().generated_documents.find(
            {"user_id": user_id, "created_at": {"$gte": since}},
            {"_id": 0, "document_type": 1, "created_at": 1},
        )
        async for record in cursor:
            created_at = record.get("created_at")
            field = _ANALYTICS_FIELDS.get(record.get("document_type"))
            if not isinstance(created_at, datetime) or not field:
                continue
            bucket = buckets.get(_as_utc(created_at).date().isoformat())
            if bucket is not None:
                setattr(bucket, field, getattr(bucket, field) + 1)

        return list(buckets.values())


# Global service instance
document_store = DocumentStore()
