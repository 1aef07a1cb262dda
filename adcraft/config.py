import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    def __init__(self):
        # Storage
        self.STORE_BACKEND = os.environ.get("STORE_BACKEND", "file").lower()
        self.STORE_PATH = os.environ.get("STORE_PATH", "/tmp/adcraft_store")
        self.REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        self.REDIS_KEY_PREFIX = os.environ.get("REDIS_KEY_PREFIX", "adcraft:")

        # Collection keys
        self.PRODUCTS_KEY = os.environ.get("PRODUCTS_KEY", "products")
        self.AVATARS_KEY = os.environ.get("AVATARS_KEY", "avatars")

        # Webhook workflows
        self.PRODUCT_AVATAR_WEBHOOK_URL = os.environ.get("PRODUCT_AVATAR_WEBHOOK_URL", "")

        # Retry configuration
        self.MAX_RETRIES = int(os.environ.get("MAX_RETRIES", "3"))
        self.REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "30"))
        self.RETRY_BACKOFF = float(os.environ.get("RETRY_BACKOFF", "1.5"))

        # Error tracking
        self.SENTRY_DSN = os.environ.get("SENTRY_DSN", "")
        self.ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

        # Application settings
        self.DEBUG = os.environ.get("DEBUG", "false").lower() == "true"
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    @property
    def has_sentry(self) -> bool:
        return bool(self.SENTRY_DSN)

    @property
    def has_webhook(self) -> bool:
        return bool(self.PRODUCT_AVATAR_WEBHOOK_URL)


# Create an instance
config = Config()
