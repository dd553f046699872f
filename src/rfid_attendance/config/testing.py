import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "rfid_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SCAN_DEBOUNCE_SECONDS = 5
LATE_THRESHOLD_MINUTES = 10
EARLY_GRACE_MINUTES = 15
LATE_CHECKOUT_GRACE_MINUTES = 15

BROADCAST_ROOM = "reader-updates"
SOCKETIO_CORS_ORIGINS = "*"
