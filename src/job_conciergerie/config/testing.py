import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "job_conciergerie_test"),
}

SMTP_HOST = "localhost"
SMTP_PORT = 1025
SMTP_USER = ""
SMTP_PASSWORD = ""
SMTP_FROM_EMAIL = "test@job-conciergerie.fr"

IPFS_JWT = "test-jwt"
IPFS_API_URL = "https://uploads.example.test/v3/files"
IPFS_PUBLIC_URL = "https://api.example.test/v3/files/public/"
GATEWAY_DOMAIN = "gateway.example.test"
FALLBACK_IMAGE_URL = "/static/home.webp"

PUBLIC_BASE_URL = "http://localhost:5000"
MAX_DEVICES = 3
COMPANIES = ""

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True

AUTO_INIT_DB = False
