import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "job_conciergerie"),
}

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL", "")

IPFS_JWT = os.getenv("IPFS_JWT", "")
IPFS_API_URL = os.getenv("IPFS_API_URL", "https://uploads.pinata.cloud/v3/files")
IPFS_PUBLIC_URL = os.getenv("IPFS_PUBLIC_URL", "https://api.pinata.cloud/v3/files/public/")
GATEWAY_DOMAIN = os.getenv("GATEWAY_DOMAIN", "")
FALLBACK_IMAGE_URL = os.getenv("FALLBACK_IMAGE_URL", "/static/home.webp")

PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "https://job-conciergerie.fr")
MAX_DEVICES = int(os.getenv("MAX_DEVICES", "3"))
COMPANIES = os.getenv("COMPANIES", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
