import os

from dotenv import load_dotenv

load_dotenv()
BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:8000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
TEMPLATES_DIR = os.getenv("TEMPLATES_DIR", "templates")  # relative to the working directory
REPORT_FILENAME_PREFIX = os.getenv("REPORT_FILENAME_PREFIX", "nutrition_targets")
DEFAULT_INTENSITY = os.getenv("DEFAULT_INTENSITY", "moderate")  # moderate | intense
