"""Configuration module for the stylist earnings engine."""

import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Storage backend: "postgres" or "memory"
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "postgres").strip().lower()

    # PostgreSQL Database
    POSTGRES_HOST: str = os.getenv("DB_HOST", "localhost")
    POSTGRES_PORT: int = int(os.getenv("DB_PORT", "5432"))
    POSTGRES_DB: str = os.getenv("DB_NAME", "estilista")
    POSTGRES_USER: str = os.getenv("DB_USER", "estilista")
    POSTGRES_PASSWORD: str = os.getenv("DB_PASSWORD", "")

    # Time
    TIMEZONE: str = os.getenv("TIMEZONE", "America/Argentina/Buenos_Aires")
    DATE_FORMAT: str = "%Y-%m-%d"

    # Defaults for the first settings record of a user
    DEFAULT_WEEKLY_TARGET: Decimal = Decimal(os.getenv("DEFAULT_WEEKLY_TARGET", "150000"))
    DEFAULT_BASE_COMMISSION_RATE: Decimal = Decimal(os.getenv("DEFAULT_BASE_COMMISSION_RATE", "0.40"))
    DEFAULT_STREAK_BONUS_RATE: Decimal = Decimal(os.getenv("DEFAULT_STREAK_BONUS_RATE", "0.05"))
    DEFAULT_STREAK_BONUS_THRESHOLD: Decimal = Decimal(os.getenv("DEFAULT_STREAK_BONUS_THRESHOLD", "0"))

    # Streak bonus stacks for at most this many weeks
    MAX_STREAK_WEEKS: int = 4

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration parameters.

        Raises:
            ValueError: If any required parameter is missing or invalid.
        """
        if cls.STORAGE_BACKEND not in ("postgres", "memory"):
            raise ValueError(
                f"STORAGE_BACKEND must be 'postgres' or 'memory', got '{cls.STORAGE_BACKEND}'"
            )

        if cls.STORAGE_BACKEND == "postgres":
            required = {
                "DB_NAME": cls.POSTGRES_DB,
                "DB_USER": cls.POSTGRES_USER,
            }
            missing = [name for name, value in required.items() if not value]

            if missing:
                raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

        for name in ("DEFAULT_BASE_COMMISSION_RATE", "DEFAULT_STREAK_BONUS_RATE"):
            rate = getattr(cls, name)
            if not Decimal("0") <= rate <= Decimal("1"):
                raise ValueError(f"{name} must be a decimal between 0 and 1, got {rate}")

    @classmethod
    def get_db_params(cls) -> dict:
        """Get PostgreSQL connection parameters.

        Returns:
            Dict with connection parameters for psycopg2
        """
        return {
            "host": cls.POSTGRES_HOST,
            "port": cls.POSTGRES_PORT,
            "database": cls.POSTGRES_DB,
            "user": cls.POSTGRES_USER,
            "password": cls.POSTGRES_PASSWORD,
        }
