import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "rfid_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SCAN_DEBOUNCE_SECONDS = int(os.getenv("SCAN_DEBOUNCE_SECONDS", "5"))
LATE_THRESHOLD_MINUTES = int(os.getenv("LATE_THRESHOLD_MINUTES", "10"))
EARLY_GRACE_MINUTES = int(os.getenv("EARLY_GRACE_MINUTES", "15"))
LATE_CHECKOUT_GRACE_MINUTES = int(os.getenv("LATE_CHECKOUT_GRACE_MINUTES", "15"))

BROADCAST_ROOM = os.getenv("BROADCAST_ROOM", "reader-updates")
SOCKETIO_CORS_ORIGINS = [o.strip() for o in os.getenv("FRONTEND_URL", "").split(",") if o.strip()]
