import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///backoffice.db")

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    ROWS_PER_PAGE = int(os.getenv("ROWS_PER_PAGE", 20))
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD")

    # outbound DID vendor calls
    VENDOR_HTTP_TIMEOUT = float(os.getenv("VENDOR_HTTP_TIMEOUT", 30))
    VENDOR_MAX_RETRIES = int(os.getenv("VENDOR_MAX_RETRIES", 3))
    VENDOR_RETRY_BACKOFF = float(os.getenv("VENDOR_RETRY_BACKOFF", 0.5))

    COMMIO_BASE_URL = os.getenv("COMMIO_BASE_URL", "https://api.thinq.com")
    COMMIO_ACCOUNT_ID = os.getenv("COMMIO_ACCOUNT_ID")
    COMMIO_ROUTE_ID = os.getenv("COMMIO_ROUTE_ID")

class DevelopmentConfig(Config):
    DEBUG = True

class ProductionConfig(Config):
    DEBUG = False

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    COMMIO_ACCOUNT_ID = "14642"
    COMMIO_ROUTE_ID = None
    VENDOR_RETRY_BACKOFF = 0


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
