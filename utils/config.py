"""
Unified configuration management with Pydantic validation.
Loads and validates all environment variables.
"""

from pathlib import Path
from typing import List
from dotenv import load_dotenv
from pydantic import Field, field_validator, ValidationError
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Config(BaseSettings):
    """Application configuration with validation."""

    # ========================
    # Data Service Configuration
    # ========================
    data_service_url: str = Field(
        default="http://localhost:8080",
        alias="DATA_SERVICE_URL"
    )

    # ========================
    # API Configuration
    # ========================
    api_timeout: int = Field(default=30, alias="API_TIMEOUT")
    api_max_retries: int = Field(default=3, alias="API_MAX_RETRIES")
    api_retry_backoff: int = Field(default=2, alias="API_RETRY_BACKOFF")

    # ========================
    # Aggregation Configuration
    # ========================
    max_concurrent_fetches: int = Field(default=8, alias="MAX_CONCURRENT_FETCHES")
    image_load_timeout_ms: int = Field(default=1000, alias="IMAGE_LOAD_TIMEOUT_MS")

    # ========================
    # Annotation Configuration
    # ========================
    critical_fault_labels: str = Field(default="pf", alias="CRITICAL_FAULT_LABELS")
    fault_labels: str = Field(default="f", alias="FAULT_LABELS")

    # ========================
    # File Storage Configuration
    # ========================
    report_dir: str = Field(default="reports", alias="REPORT_DIR")
    log_dir: str = Field(default="logs", alias="LOG_DIR")

    # ========================
    # Logging Configuration
    # ========================
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_to_file: bool = Field(default=False, alias="LOG_TO_FILE")

    # ========================
    # Development Configuration
    # ========================
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # ========================
    # Validators
    # ========================

    @field_validator("data_service_url")
    @classmethod
    def validate_service_url(cls, v: str) -> str:
        """Validate data service base URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("DATA_SERVICE_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("api_timeout", "api_max_retries", "max_concurrent_fetches", "image_load_timeout_ms")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        """Validate positive integer settings."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment."""
        valid_envs = ["development", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of {valid_envs}")
        return v.lower()

    # ========================
    # Helper Properties
    # ========================

    @property
    def critical_fault_labels_list(self) -> List[str]:
        """Get critical fault labels as normalized list."""
        return [t.strip().lower() for t in self.critical_fault_labels.split(",") if t.strip()]

    @property
    def fault_labels_list(self) -> List[str]:
        """Get fault labels as normalized list."""
        return [t.strip().lower() for t in self.fault_labels.split(",") if t.strip()]

    @property
    def image_load_timeout(self) -> float:
        """Image load timeout in seconds."""
        return self.image_load_timeout_ms / 1000.0

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


def get_config() -> Config:
    """
    Load and validate configuration.
    Exits if configuration is invalid.
    """
    try:
        return Config()

    except ValidationError as e:
        print("\n❌ Configuration Error:")
        print("=" * 60)
        for error in e.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            print(f"\n Field: {field}")
            print(f"  Error: {error['msg']}")
            if "input" in error:
                print(f"  Value: {error['input']}")
        print("\n" + "=" * 60)
        print("\nPlease check your .env file and fix the errors above.")
        print("See .env.example for reference.\n")
        raise SystemExit(1)


# Global configuration instance
config = get_config()


# Export commonly used paths
REPORT_DIR = Path(config.report_dir)
LOG_DIR = Path(config.log_dir)
