import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

ENV = os.getenv("ENV", "production")
PORT = int(os.getenv("PORT", 10000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CATALOG_FILE = os.getenv("CATALOG_FILE", os.path.join(BASE_DIR, "data", "vocabulary.json"))

# json | mongo | memory
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "json")
DATA_DIR = os.getenv("DATA_DIR", os.path.join(BASE_DIR, ".drill_data"))
MONGO_URI = os.getenv("MONGO_URI")
DB_NAME = os.getenv("DATABASE_NAME", "kelime_calis")
MONGO_COLLECTION = os.getenv("MONGO_COLLECTION", "state")

CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", 20))
# Pause the front end shows before moving to the next card in free study
ADVANCE_DELAY_MS = int(os.getenv("ADVANCE_DELAY_MS", 200))

FRONTEND_ORIGINS = [o.strip() for o in os.getenv("FRONTEND_ORIGIN", "").split(",") if o.strip()]
if not FRONTEND_ORIGINS:
    FRONTEND_ORIGINS = ["*"]
