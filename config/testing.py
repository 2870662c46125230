import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

LOW_ATTENDANCE_THRESHOLD = 75.0
NOTIFY_MAX_WORKERS = 2
DEFAULT_COUNTRY_CODE = "91"

TWILIO_SID = ""
TWILIO_AUTH_TOKEN = ""
TWILIO_PHONE = ""
WHATSAPP_FROM = ""

SMTP_HOST = ""
SMTP_PORT = 587
SMTP_USER = ""
SMTP_PASSWORD = ""
SMTP_SENDER = ""
SMTP_USE_TLS = False
