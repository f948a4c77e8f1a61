import logging

from app.services.patient_store import PatientStore

logger = logging.getLogger(__name__)

DEMO_INTAKES = [
    {
        "firstName": "John",
        "lastName": "Smith",
        "dateOfBirth": "1979-03-14",
        "email": "john.smith@example.com",
        "phone": "555-0142",
        "chiefComplaint": "Chest tightness on exertion",
        "biologicalSex": "Male",
        "painLevel": "4",
        "symptomDuration": "2 weeks",
        "medicalHistory": "Hypertension, type 2 diabetes",
        "allergies": "None known",
        "medications": "Metformin 500mg BID, Lisinopril 10mg",
        "smokingStatus": "Former",
        "consentTreatment": True,
        "consentPrivacy": True,
        "consentAccuracy": True,
    },
    {
        "firstName": "Maria",
        "lastName": "Lopez",
        "dateOfBirth": "1956-11-02",
        "email": "maria.lopez@example.com",
        "phone": "555-0187",
        "chiefComplaint": "Recurring headaches and blurred vision",
        "biologicalSex": "Female",
        "painLevel": "6",
        "symptomDuration": "1 month",
        "medicalHistory": "Atrial fibrillation",
        "allergies": "Penicillin",
        "medications": "Apixaban 5mg BID",
        "consentTreatment": True,
        "consentPrivacy": True,
        "consentAccuracy": True,
    },
    {
        "firstName": "Ethan",
        "lastName": "Brooks",
        "dateOfBirth": "2001-06-21",
        "email": "ethan.brooks@example.com",
        "phone": "555-0113",
        "chiefComplaint": "Sprained left ankle",
        "biologicalSex": "Male",
        "painLevel": "5",
        "symptomDuration": "3 days",
        "exerciseFrequency": "Daily",
        "consentTreatment": True,
        "consentPrivacy": True,
        "consentAccuracy": True,
    },
]


async def seed_demo_patients(store: PatientStore) -> int:
    """Create the demo intakes if the store is empty. Returns how many were added."""
    current = await store.stats()
    if current.total:
        return 0
    for intake in DEMO_INTAKES:
        await store.create(dict(intake))
    logger.info("Seeded %d demo patient records", len(DEMO_INTAKES))
    return len(DEMO_INTAKES)
