# laundrydesk/config.py
import os
from datetime import timedelta

class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me-before-going-live")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_ACCESS_TOKEN_HOURS", "12")))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Money rules
    PAYMENT_TOLERANCE = os.getenv("PAYMENT_TOLERANCE", "0.01")
    DUPLICATE_PAYMENT_WINDOW_SECONDS = int(os.getenv("DUPLICATE_PAYMENT_WINDOW_SECONDS", "60"))
    RECEIPT_NUMBER_MAX_ATTEMPTS = int(os.getenv("RECEIPT_NUMBER_MAX_ATTEMPTS", "5"))

    # East Africa Time for the API_TIME_HUMAN stamp
    API_UTC_OFFSET_HOURS = int(os.getenv("API_UTC_OFFSET_HOURS", "3"))

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'laundry.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    DUPLICATE_PAYMENT_WINDOW_SECONDS = 60

    @staticmethod
    def init_app(app):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
