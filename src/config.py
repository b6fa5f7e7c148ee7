import os

from dotenv import load_dotenv

from src.models.settings import Settings

# Load settings from .env file if it exists
settings = Settings.from_env_file(validate=False)

# Load environment variables (will override .env file values)
load_dotenv()


def env_bool(key: str, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    value = os.environ.get(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


class Config:
    # Use settings from model, but allow environment variables to override
    DEBUG = env_bool("DEBUG", settings.debug)
    LOG_LEVEL = os.environ.get("LOG_LEVEL", settings.log_level)

    # Database URL - SQLite database in data directory
    DATA_DIR = os.environ.get("DATA_DIR", settings.data_dir)
    DATABASE_NAME = os.environ.get("DATABASE_NAME", settings.database_name)
    DATABASE_URL = os.environ.get(
        "DATABASE_URL", f"sqlite:///{DATA_DIR}/{DATABASE_NAME}.db"
    )

    # Simulated backend
    SUCCESS_RATE = float(os.environ.get("SUCCESS_RATE", str(settings.success_rate)))
    MAX_DELAY_MS = int(os.environ.get("MAX_DELAY_MS", str(settings.max_delay_ms)))
    STORAGE_KEY = os.environ.get("STORAGE_KEY", settings.storage_key)

    # Random action generator
    SIMULATION_MIN_PERIOD = int(
        os.environ.get("SIMULATION_MIN_PERIOD", str(settings.simulation_min_period))
    )
    SIMULATION_MAX_PERIOD = int(
        os.environ.get("SIMULATION_MAX_PERIOD", str(settings.simulation_max_period))
    )
