import os
from dotenv import load_dotenv

load_dotenv()


def _csv(value):
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Tenant resolution
    PLATFORM_DOMAIN = os.getenv("PLATFORM_DOMAIN", "builder.example.com").lower()
    PREVIEW_HOSTS = _csv(os.getenv("PREVIEW_HOSTS", "localhost,127.0.0.1"))

    # Rendering
    DEFAULT_BREAKPOINT = os.getenv("DEFAULT_BREAKPOINT", "desktop")
    MAX_TREE_DEPTH = int(os.getenv("MAX_TREE_DEPTH", "64"))
    FREE_PLAN_WATERMARK = os.getenv("FREE_PLAN_WATERMARK", "true").lower() == "true"


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///sitebuilder-dev.db")


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "testing-secret-key-with-enough-length"
    PLATFORM_DOMAIN = "builder.test"
    PREVIEW_HOSTS = ["localhost", "preview.builder.test"]


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")


config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig
}
