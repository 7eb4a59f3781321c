import os
import warnings

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


class Config:
    # Database configuration - built from environment at initialization
    def __init__(self):
        """Initialize configuration with dynamic database URI"""
        self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()

    def _build_database_uri(self):
        """Build database URI from environment variables"""
        database_url = os.environ.get("DATABASE_URL")

        if database_url:
            return database_url

        db_type = os.environ.get("DB_TYPE", "sqlite")

        if db_type.lower() == "postgresql":
            db_host = os.environ.get("DB_HOST") or "localhost"
            db_port = os.environ.get("DB_PORT") or "5432"
            db_name = os.environ.get("DB_NAME") or "ats_pickem_db"
            db_user = os.environ.get("DB_USER") or "ats_user"
            db_password = os.environ.get("DB_PASSWORD") or "ats_password"

            return f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
        else:
            # Default to SQLite for development
            return "sqlite:///" + os.path.join(basedir, "ats_pickem.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # External data provider (CollegeFootballData)
    CFBD_API_BASE_URL = (
        os.environ.get("CFBD_API_BASE_URL") or "https://api.collegefootballdata.com"
    )
    CFBD_API_KEY = os.environ.get("CFBD_API_KEY")
    CFBD_LINE_PROVIDER = os.environ.get("CFBD_LINE_PROVIDER", "consensus")

    # Game settings
    SEASON_YEAR = int(os.environ.get("SEASON_YEAR") or 2025)
    PICKS_PER_WEEK = int(os.environ.get("PICKS_PER_WEEK") or 6)
    TIMEZONE = os.environ.get("TIMEZONE", "America/New_York")

    # Scheduler configuration
    SCHEDULER_ENABLED = os.environ.get("SCHEDULER_ENABLED", "True").lower() == "true"
    RESULTS_SYNC_MINUTES = int(os.environ.get("RESULTS_SYNC_MINUTES") or 30)
    ALIAS_REFRESH_HOUR = int(os.environ.get("ALIAS_REFRESH_HOUR") or 4)
    SYSTEM_USER_ID = os.environ.get("SYSTEM_USER_ID", "results-sync")

    # Logging configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = os.environ.get("LOG_TO_CONSOLE", "True").lower() == "true"
    LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "True").lower() == "true"
    LOG_DIR = os.environ.get("LOG_DIR", "logs")

    # Environment detection
    FLASK_ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = FLASK_ENV == "development"
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration with helpful defaults"""

    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get("SQLALCHEMY_ECHO", "False").lower() == "true"


class ProductionConfig(Config):
    """Production configuration"""

    DEBUG = False

    # In production, require explicit environment variables
    def __init__(self):
        super().__init__()  # Call parent __init__ to build database URI

        if not os.environ.get("DATABASE_URL") and not os.environ.get("DB_TYPE"):
            warnings.warn(
                "PRODUCTION WARNING: no DATABASE_URL or DB_TYPE set, "
                "falling back to a local SQLite file.",
                UserWarning,
            )
        if not self.CFBD_API_KEY:
            warnings.warn(
                "PRODUCTION WARNING: CFBD_API_KEY not set! "
                "Automatic line and result sync will be unavailable.",
                UserWarning,
            )


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    SCHEDULER_ENABLED = False
    LOG_TO_FILE = False
    LOG_TO_CONSOLE = False

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"


# Configuration mapping
config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
