import os


def _flag(name, default="true"):
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


def _timeout():
    value = os.environ.get("API_TIMEOUT")
    return float(value) if value else None


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")

    # Backend APIs
    LIBRARY_API_URL = os.environ.get(
        "LIBRARY_API_URL", "https://backend-library-one.vercel.app/api"
    )
    HOTEL_API_URL = os.environ.get("HOTEL_API_URL", "http://localhost:5000/api")
    LIBRARY_API_STRICT = _flag("LIBRARY_API_STRICT")
    HOTEL_API_STRICT = _flag("HOTEL_API_STRICT")
    API_TIMEOUT = _timeout()

    PAGE_SIZE = int(os.environ.get("PAGE_SIZE", "10"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    WTF_CSRF_ENABLED = _flag("WTF_CSRF_ENABLED")
