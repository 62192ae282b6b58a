"""Configuration constants loaded from the environment."""

import os

POSTGRES_CONFIG = {
    "host": os.getenv("POSTGRES_HOST", "localhost"),
    "port": int(os.getenv("POSTGRES_PORT", "5432")),
    "database": os.getenv("POSTGRES_DB", "catalog"),
    "user": os.getenv("POSTGRES_USER", "postgres"),
    "password": os.getenv("POSTGRES_PASSWORD", "postgres"),
}

# DATABASE_URL wins over the discrete POSTGRES_* settings when present
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{POSTGRES_CONFIG['user']}:{POSTGRES_CONFIG['password']}@"
    f"{POSTGRES_CONFIG['host']}:{POSTGRES_CONFIG['port']}/{POSTGRES_CONFIG['database']}",
)

DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))
DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "5"))  # seconds
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "10"))  # seconds
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))

REDIS_CONFIG = {
    "host": os.getenv("REDIS_HOST", "localhost"),
    "port": int(os.getenv("REDIS_PORT", "6379")),
    "db": int(os.getenv("REDIS_DB", "0")),
    "socket_timeout": float(os.getenv("REDIS_SOCKET_TIMEOUT", "1.0")),
}

CACHE_TTL = int(os.getenv("CACHE_TTL", "300"))  # 5 minutes for listing pages
PRODUCT_CACHE_ENABLED = os.getenv("PRODUCT_CACHE_ENABLED", "true").lower() in ("1", "true", "yes")

S3_CONFIG = {
    "bucket": os.getenv("AWS_S3_BUCKET", "catalog-images"),
    "region": os.getenv("AWS_REGION", "ap-south-1"),
    "public_url": os.getenv("AWS_S3_PUBLIC_URL"),
    "endpoint_url": os.getenv("AWS_S3_ENDPOINT_URL"),
    "access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
    "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
}

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:5000,http://localhost:5001,http://localhost:5173,http://localhost:8080"
    ).split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
