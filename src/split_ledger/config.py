"""Configuration management for Split Ledger."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger file
    ledger_path: Path = Path.home() / ".split_ledger" / "ledger.json"

    # Notification settings
    large_expense_threshold: float | None = None  # None disables the notifier

    def __init__(self, **kwargs):
        """Initialize settings and create the ledger directory if needed."""
        super().__init__(**kwargs)
        self.ledger_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check LEDGER_PATH and "
            f"LARGE_EXPENSE_THRESHOLD in your environment or .env file.\n"
            f"Error: {e}"
        ) from e
