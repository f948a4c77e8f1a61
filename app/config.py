import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# Storage
DATA_FILE = os.getenv("DATA_FILE", str(BASE_DIR / "patients.json"))
DATABASE_URL = os.getenv("DATABASE_URL", "")

# HTTP server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3002"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
STATIC_DIR = os.getenv("STATIC_DIR", str(BASE_DIR / "public"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SEED_DEMO_PATIENTS = os.getenv("SEED_DEMO_PATIENTS", "false").lower() in ("1", "true", "yes", "on")
