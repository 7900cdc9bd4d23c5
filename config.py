"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Database - Priority: DATABASE_URL > DB_* (PostgreSQL) > local SQLite file
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL and os.getenv('DB_HOST'):
        DB_HOST = os.getenv('DB_HOST')
        DB_PORT = os.getenv('DB_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME', 'canteen')
        DB_USER = os.getenv('DB_USER', 'canteen')
        DB_PASSWORD = os.getenv('DB_PASSWORD', 'canteen')

        DATABASE_URL = (
            f"postgresql+psycopg://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    if not DATABASE_URL:
        DATABASE_URL = 'sqlite:///canteen.db'

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'
    DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', '10'))
    DB_MAX_OVERFLOW = int(os.getenv('DB_MAX_OVERFLOW', '20'))
    SQLITE_BUSY_TIMEOUT = float(os.getenv('SQLITE_BUSY_TIMEOUT', '30'))  # seconds

    # Purchases
    # Stock was never decremented on purchase historically; opt in here.
    TRACK_STOCK = os.getenv('TRACK_STOCK', 'false').lower() == 'true'
    PURCHASE_TIMEOUT = float(os.getenv('PURCHASE_TIMEOUT', '0'))  # seconds, 0 = no limit
    DEFAULT_PAYMENT_METHOD = os.getenv('DEFAULT_PAYMENT_METHOD', 'BALANCE')
