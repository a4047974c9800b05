import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

GATEWAY_NAME = "razorpay"

DATABASE_URL = os.getenv("DATABASE_URL")
JWT_SECRET = os.getenv("JWT_SECRET")

RAZORPAY_API_URL = os.getenv("RAZORPAY_API_URL", "https://api.razorpay.com/v1").rstrip("/")
RAZORPAY_TIMEOUT = float(os.getenv("RAZORPAY_TIMEOUT", "10"))
# Percentage added on top of the payable amount
RAZORPAY_SURCHARGE = os.getenv("RAZORPAY_SURCHARGE", "0")

SITE_NAME = os.getenv("SITE_NAME", "Learning Platform")
SITE_LOGO_URL = os.getenv("SITE_LOGO_URL", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def database_url():
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not set. Check your .env file.")
    return DATABASE_URL


def configure_logging():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
