"""Errors raised by the patient record store and its storage backends."""


class PatientStoreError(Exception):
    """Base class for all record store failures."""


class ValidationError(PatientStoreError):
    """An intake or update field was missing or not acceptable."""

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"{field} is required")
        self.field = field


class PatientNotFoundError(PatientStoreError):
    def __init__(self, patient_id: str) -> None:
        super().__init__(f"Patient not found: {patient_id}")
        self.patient_id = patient_id


class StorageError(PatientStoreError):
    """Persisted collection could not be read or written."""


class StorageCorruptError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass
