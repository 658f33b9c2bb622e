from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import json
import os

from risksnap.constants import DEFAULT_FETCH_TIMEOUT_SECONDS, DEFAULT_USER_AGENT

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///risk_snapshots.db")  # Default to SQLite
    USER_AGENT = os.getenv("USER_AGENT", DEFAULT_USER_AGENT)
    FETCH_TIMEOUT = int(os.getenv("FETCH_TIMEOUT", str(DEFAULT_FETCH_TIMEOUT_SECONDS)))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


@dataclass
class Config:
    """Configuration for the risk snapshot tool."""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: int = DEFAULT_FETCH_TIMEOUT_SECONDS
    max_retries: int = 1
    database_url: str = "sqlite:///risk_snapshots.db"
    log_level: str = "INFO"
    thresholds_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment
        """
        return cls(
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            timeout=int(os.getenv("FETCH_TIMEOUT", str(DEFAULT_FETCH_TIMEOUT_SECONDS))),
            max_retries=int(os.getenv("FETCH_MAX_RETRIES", "1")),
            database_url=os.getenv("DATABASE_URL", "sqlite:///risk_snapshots.db"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            thresholds_file=os.getenv("RISKSNAP_THRESHOLDS_FILE"),
        )


@dataclass
class RiskThresholds:
    """Configurable thresholds for the risk rule ladders."""

    # Performance
    scripts_high: int = 25
    scripts_moderate: int = 15
    script_domains_high: int = 8
    script_domains_moderate: int = 4
    stylesheets_moderate: int = 6
    html_size_kb_moderate: float = 200.0

    # Core Web Vitals proxy
    cwv_lazy_image_count: int = 5  # Images above this count expect lazy loading
    cwv_scripts_high: int = 20
    cwv_script_domains_high: int = 6

    # SEO & Structure
    title_min: int = 30
    title_max: int = 70

    # Accessibility
    missing_alt_high: int = 10
    missing_alt_moderate: int = 3
    aria_button_count: int = 3  # Buttons above this count expect ARIA attributes

    # Mobile readiness
    mobile_lazy_image_count: int = 3

    # Output list caps
    max_strengths: int = 6
    max_issues: int = 10
    max_recommendations: int = 8

    @classmethod
    def from_env(cls) -> "RiskThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with RISKSNAP_THRESHOLD_
        e.g., RISKSNAP_THRESHOLD_SCRIPTS_HIGH=30

        Returns:
            RiskThresholds with values from environment
        """
        thresholds = cls()
        prefix = "RISKSNAP_THRESHOLD_"

        for field_name in thresholds.__dataclass_fields__:
            env_key = f"{prefix}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                thresholds._set_coerced(field_name, env_value)

        return thresholds

    def _set_coerced(self, field_name: str, value) -> None:
        """Set a field after converting the value to the field's type.

        Values that cannot be converted leave the default in place.
        """
        field_type = self.__dataclass_fields__[field_name].type
        try:
            if field_type == int:
                # Accept "30" and 30.0 from files, but not 30.5
                number = float(value)
                if not number.is_integer():
                    raise ValueError(f"{field_name} must be a whole number")
                setattr(self, field_name, int(number))
            elif field_type == float:
                setattr(self, field_name, float(value))
        except (TypeError, ValueError):
            pass  # Keep default if conversion fails

    @classmethod
    def from_file(cls, path: str) -> "RiskThresholds":
        """Load thresholds from a JSON configuration file.

        Args:
            path: Path to JSON configuration file

        Returns:
            RiskThresholds with values from file
        """
        thresholds = cls()
        file_path = Path(path)

        if not file_path.exists():
            return thresholds

        with open(file_path, 'r') as f:
            config = json.load(f)

        threshold_config = config.get('thresholds', config)

        for field_name in thresholds.__dataclass_fields__:
            if field_name in threshold_config:
                thresholds._set_coerced(field_name, threshold_config[field_name])

        return thresholds

    def to_dict(self) -> dict:
        """Convert thresholds to dictionary.

        Returns:
            Dictionary of all threshold values
        """
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }

    def save_to_file(self, path: str) -> None:
        """Save current thresholds to a JSON file.

        Args:
            path: Path to save configuration
        """
        with open(path, 'w') as f:
            json.dump({'thresholds': self.to_dict()}, f, indent=2)


# Global default thresholds instance
default_thresholds = RiskThresholds()
