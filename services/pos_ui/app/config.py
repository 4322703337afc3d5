import os

API_BASE_URL = os.getenv("POS_API_BASE_URL", "https://plywood.pythonanywhere.com").rstrip("/")
STORAGE_DSN = os.getenv("POS_STORAGE_DSN", "sqlite:///pos_ui.db")

REQUEST_TIMEOUT = int(os.getenv("POS_REQUEST_TIMEOUT", "30"))

CURRENCY_LABEL = os.getenv("POS_CURRENCY_LABEL", "UZS")
LOG_LEVEL = os.getenv("POS_LOG_LEVEL")
