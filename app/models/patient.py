"""Pydantic models for patient intake records.

Records are serialized with camelCase keys (``firstName``, ``submittedAt``)
which is also the on-disk format. Python code uses the snake_case
attribute names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

STATUS_PENDING = "pending"
STATUS_REVIEWED = "reviewed"
VALID_STATUSES = (STATUS_PENDING, STATUS_REVIEWED)

# Checked in this order; the first missing one is reported.
REQUIRED_FIELDS = (
    "firstName",
    "lastName",
    "dateOfBirth",
    "email",
    "phone",
    "chiefComplaint",
)

# Assigned by the store, never taken from an intake submission.
STORE_MANAGED_FIELDS = frozenset({
    "id",
    "status",
    "submittedAt",
    "submitted_at",
    "reviewedAt",
    "reviewed_at",
    "reviewedBy",
    "reviewed_by",
})


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class PatientRecord(CamelModel):
    """A single intake submission plus its review lifecycle.

    The six required fields are typed; the clinical and demographic fields
    the intake form sends are optional, and any other keys pass through
    untouched as extras.
    """

    model_config = ConfigDict(extra="allow")

    id: str

    # Required at intake
    first_name: str
    last_name: str
    date_of_birth: str
    email: str
    phone: str
    chief_complaint: str

    # Demographics
    biological_sex: str | None = None
    gender_identity: str | None = None
    pronouns: str | None = None

    # Contact
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    emergency_name: str | None = None
    emergency_phone: str | None = None

    # Visit
    pain_level: str | None = None
    symptom_duration: str | None = None

    # History
    medical_history: str | None = None
    surgical_history: str | None = None
    family_history: str | None = None
    allergies: str | None = None
    medications: str | None = None

    # Lifestyle
    smoking_status: str | None = None
    alcohol_use: str | None = None
    exercise_frequency: str | None = None
    occupation: str | None = None

    # Insurance
    insurance_provider: str | None = None
    insurance_member_id: str | None = None
    insurance_group_number: str | None = None
    policy_holder_name: str | None = None

    # Consent checkboxes
    consent_treatment: bool | str | None = None
    consent_privacy: bool | str | None = None
    consent_accuracy: bool | str | None = None

    # Lifecycle, managed by the store
    status: str = STATUS_PENDING
    submitted_at: str
    reviewed_at: str | None = None
    reviewed_by: str | None = None
    notes: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_storage(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting optional fields never supplied."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class PatientSummary(CamelModel):
    """List-view projection of a record. Clinical history is left out."""

    id: str
    first_name: str
    last_name: str
    date_of_birth: str
    email: str
    phone: str
    chief_complaint: str
    status: str
    submitted_at: str
    reviewed_at: str | None = None
    reviewed_by: str | None = None

    @classmethod
    def from_record(cls, record: PatientRecord) -> "PatientSummary":
        return cls(
            id=record.id,
            first_name=record.first_name,
            last_name=record.last_name,
            date_of_birth=record.date_of_birth,
            email=record.email,
            phone=record.phone,
            chief_complaint=record.chief_complaint,
            status=record.status,
            submitted_at=record.submitted_at,
            reviewed_at=record.reviewed_at,
            reviewed_by=record.reviewed_by,
        )


class PatientUpdate(CamelModel):
    """PATCH body. Only keys present in the request are applied."""

    status: str | None = None
    reviewed_by: str | None = None
    notes: str | None = None


class PatientFilters(BaseModel):
    search: str | None = None
    status: str | None = None
    date_of_submission: str | None = None


class PatientCreated(BaseModel):
    id: str
    message: str = "Intake submitted successfully"


class MessageResponse(BaseModel):
    message: str


class PatientStats(BaseModel):
    total: int
    pending: int
    reviewed: int
    today: int
