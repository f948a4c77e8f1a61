"""Patient record store: create, query, review and delete intake records.

Every operation runs inside one ``asyncio.Lock`` and round-trips the whole
collection through the storage adapter (load, mutate in memory, save), so
concurrent requests can neither lose each other's writes nor read a
half-written collection.
"""

import asyncio
import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.database import StorageAdapter, get_storage
from app.exceptions import PatientNotFoundError, ValidationError
from app.models.patient import (
    REQUIRED_FIELDS,
    STATUS_PENDING,
    STATUS_REVIEWED,
    STORE_MANAGED_FIELDS,
    VALID_STATUSES,
    PatientFilters,
    PatientRecord,
    PatientStats,
    PatientSummary,
    PatientUpdate,
)

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as ``2024-01-05T10:00:00.000Z``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_today() -> str:
    return datetime.now(UTC).date().isoformat()


def validate_intake(data: dict[str, Any]) -> None:
    for field in REQUIRED_FIELDS:
        if not data.get(field):
            raise ValidationError(field)


def validate_status_change(record: PatientRecord, status: str | None) -> None:
    if not status:
        return
    if status not in VALID_STATUSES:
        raise ValidationError("status", f"status must be one of: {', '.join(VALID_STATUSES)}")
    if status == STATUS_PENDING and record.status == STATUS_REVIEWED:
        raise ValidationError("status", "status cannot return to pending once reviewed")


def matches_filters(record: PatientRecord, filters: PatientFilters) -> bool:
    if filters.search:
        q = filters.search.lower()
        if not (
            q in record.full_name.lower()
            or q in record.email.lower()
            or q in record.chief_complaint.lower()
        ):
            return False
    if filters.status and filters.status != "all" and record.status != filters.status:
        return False
    if filters.date_of_submission and not record.submitted_at.startswith(filters.date_of_submission):
        return False
    return True


class PatientStore:
    def __init__(self, storage: StorageAdapter) -> None:
        self._storage = storage
        self._lock = asyncio.Lock()

    @property
    def storage(self) -> StorageAdapter:
        return self._storage

    async def create(self, data: dict[str, Any]) -> str:
        """Validate an intake submission and insert it at the head of the list."""
        validate_intake(data)

        intake = {k: v for k, v in data.items() if k not in STORE_MANAGED_FIELDS}
        try:
            record = PatientRecord.model_validate({
                **intake,
                "id": str(uuid.uuid4()),
                "status": STATUS_PENDING,
                "submittedAt": utc_now_iso(),
                "reviewedAt": None,
                "reviewedBy": None,
            })
        except PydanticValidationError as exc:
            loc = exc.errors()[0]["loc"]
            field = str(loc[0]) if loc else "body"
            raise ValidationError(field, f"{field} is invalid") from exc

        async with self._lock:
            records = await self._storage.load_all()
            records.insert(0, record)
            await self._storage.save_all(records)

        logger.info("Created patient record %s", record.id)
        return record.id

    async def get_by_id(self, patient_id: str) -> PatientRecord:
        async with self._lock:
            records = await self._storage.load_all()
        for record in records:
            if record.id == patient_id:
                return record
        raise PatientNotFoundError(patient_id)

    async def list_patients(self, filters: PatientFilters | None = None) -> list[PatientSummary]:
        filters = filters or PatientFilters()
        async with self._lock:
            records = await self._storage.load_all()
        return [PatientSummary.from_record(r) for r in records if matches_filters(r, filters)]

    async def update(self, patient_id: str, patch: PatientUpdate) -> PatientRecord:
        """Apply a partial update. ``status`` and ``reviewedBy`` are only applied
        when non-empty; ``notes`` whenever it was sent, so it can be cleared.
        Setting ``status`` to reviewed stamps ``reviewedAt`` every time.
        """
        async with self._lock:
            records = await self._storage.load_all()
            record = next((r for r in records if r.id == patient_id), None)
            if record is None:
                raise PatientNotFoundError(patient_id)

            validate_status_change(record, patch.status)

            if patch.status:
                record.status = patch.status
            if patch.reviewed_by:
                record.reviewed_by = patch.reviewed_by
            if "notes" in patch.model_fields_set:
                record.notes = patch.notes
            if patch.status == STATUS_REVIEWED:
                record.reviewed_at = utc_now_iso()

            await self._storage.save_all(records)

        if patch.status == STATUS_REVIEWED:
            logger.info("Patient record %s marked reviewed", patient_id)
        return record

    async def delete(self, patient_id: str) -> None:
        async with self._lock:
            records = await self._storage.load_all()
            remaining = [r for r in records if r.id != patient_id]
            if len(remaining) == len(records):
                raise PatientNotFoundError(patient_id)
            await self._storage.save_all(remaining)
        logger.info("Deleted patient record %s", patient_id)

    async def stats(self) -> PatientStats:
        async with self._lock:
            records = await self._storage.load_all()
        today = utc_today()
        return PatientStats(
            total=len(records),
            pending=sum(1 for r in records if r.status == STATUS_PENDING),
            reviewed=sum(1 for r in records if r.status == STATUS_REVIEWED),
            today=sum(1 for r in records if r.submitted_at.startswith(today)),
        )


_store: PatientStore | None = None


async def get_patient_store() -> PatientStore:
    """FastAPI dependency returning the process-wide store."""
    global _store
    storage = await get_storage()
    if _store is None or _store.storage is not storage:
        _store = PatientStore(storage)
    return _store


def reset_patient_store() -> None:
    global _store
    _store = None
