import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent  # <project>
INSTANCE_DIR = BASE_DIR / "instance"

def _default_sqlite_uri():
    return f"sqlite:///{(INSTANCE_DIR / 'tailor_payroll.db').as_posix()}"

def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or _default_sqlite_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Apps Script endpoint of the payroll spreadsheet
    SCRIPT_URL_PREFIX = "https://script.google.com/macros/s/"
    DEFAULT_SCRIPT_URL = os.getenv("DEFAULT_SCRIPT_URL", "")
    GATEWAY_TIMEOUT = _env_int("GATEWAY_TIMEOUT", 20)

    # worker photos
    PHOTO_MAX_BYTES = _env_int("PHOTO_MAX_BYTES", 2 * 1024 * 1024)
    # whole request bodies, photo plus form overhead
    MAX_CONTENT_LENGTH = PHOTO_MAX_BYTES + 512 * 1024

    # AI assistant
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
    ASSISTANT_MODEL = os.getenv("ASSISTANT_MODEL", "claude-3-5-haiku-latest")
    ASSISTANT_MAX_TOKENS = _env_int("ASSISTANT_MAX_TOKENS", 1024)
    # messages kept per month, greeting included
    ASSISTANT_HISTORY = _env_int("ASSISTANT_HISTORY", 40)
    CURRENCY = os.getenv("CURRENCY", "SAR")

def ensure_instance(app):
    # Flask instance path
    os.makedirs(app.instance_path, exist_ok=True)
    INSTANCE_DIR.mkdir(parents=True, exist_ok=True)
