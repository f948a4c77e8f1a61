import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from app.models.patient import (
    MessageResponse,
    PatientCreated,
    PatientFilters,
    PatientSummary,
    PatientUpdate,
)
from app.services.patient_store import PatientStore, get_patient_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/patients", tags=["patients"])


@router.get("", response_model=list[PatientSummary])
async def list_patients(
    search: str | None = Query(None),
    status: str | None = Query(None),
    date: str | None = Query(None, description="Submission date prefix, e.g. 2024-01-05"),
    store: PatientStore = Depends(get_patient_store),
):
    """List intake records, most recent first, without clinical history."""
    filters = PatientFilters(search=search, status=status, date_of_submission=date)
    return await store.list_patients(filters)


@router.get("/{patient_id}")
async def get_patient(patient_id: str, store: PatientStore = Depends(get_patient_store)) -> dict[str, Any]:
    """Get a single intake record with every submitted field."""
    record = await store.get_by_id(patient_id)
    return record.to_storage()


@router.post("", status_code=201, response_model=PatientCreated)
async def submit_intake(
    body: dict[str, Any] = Body(...),
    store: PatientStore = Depends(get_patient_store),
):
    """Submit a new patient intake."""
    patient_id = await store.create(body)
    return PatientCreated(id=patient_id)


@router.patch("/{patient_id}")
async def update_patient(
    patient_id: str,
    body: PatientUpdate,
    store: PatientStore = Depends(get_patient_store),
) -> dict[str, Any]:
    """Mark a record reviewed, set the reviewer, or edit provider notes."""
    record = await store.update(patient_id, body)
    return record.to_storage()


@router.delete("/{patient_id}", response_model=MessageResponse)
async def delete_patient(patient_id: str, store: PatientStore = Depends(get_patient_store)):
    """Permanently delete an intake record."""
    await store.delete(patient_id)
    return MessageResponse(message="Record deleted")
