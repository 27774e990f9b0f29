# backend/app/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/invoicing.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///invoicing.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Tenant that runs the platform; never billed a subscription
    PLATFORM_OWNER_COMPANY_TITLE = os.environ.get("PLATFORM_OWNER_COMPANY_TITLE", "CYDEO")

    # Authoritative storage in cents (250.00 per month)
    MONTHLY_SUBSCRIPTION_FEE_CENTS = int(os.environ.get("MONTHLY_SUBSCRIPTION_FEE_CENTS", "25000"))

    REPORT_PAGE_SIZE = int(os.environ.get("REPORT_PAGE_SIZE", "10"))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
