import os

from dotenv import load_dotenv

load_dotenv()

base_dir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


def _database_uri():
    # DATABASE_URL → BILLING_DB_PATH → billing.db の順
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    db_path = os.environ.get("BILLING_DB_PATH") or os.path.join(base_dir, "billing.db")
    return f"sqlite:///{db_path}"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev_secret_key")
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # sqlite のロック待ち上限（秒）
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}} if SQLALCHEMY_DATABASE_URI.startswith("sqlite") else {}

    QUOTATION_PREFIX = os.environ.get("QUOTATION_PREFIX", "WI")
    QUOTATION_NUMBER_WIDTH = 4

    RAZORPAY_KEY_ID = os.environ.get("RAZORPAY_KEY_ID")
    RAZORPAY_KEY_SECRET = os.environ.get("RAZORPAY_KEY_SECRET")
    RAZORPAY_API_URL = os.environ.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1")
    GATEWAY_CURRENCY = os.environ.get("GATEWAY_CURRENCY", "INR")
    GATEWAY_TIMEOUT = float(os.environ.get("GATEWAY_TIMEOUT", "10"))


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RAZORPAY_KEY_ID = None
    RAZORPAY_KEY_SECRET = None
