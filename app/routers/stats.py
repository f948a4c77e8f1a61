from fastapi import APIRouter, Depends

from app.models.patient import PatientStats
from app.services.patient_store import PatientStore, get_patient_store

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=PatientStats)
async def get_stats(store: PatientStore = Depends(get_patient_store)):
    """Counts for the dashboard header."""
    return await store.stats()


@router.get("/health")
async def health():
    return {"status": "ok"}
