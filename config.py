"""
Configuration management using Pydantic Settings with safe access wrapper
"""
from pydantic_settings import BaseSettings
from typing import Optional, Any


class Settings(BaseSettings):
    # Application settings
    environment: str = "production"

    # Matching settings
    context_window: int = 30
    skip_invalid_terms: bool = False
    index_cache_size: int = 8

    # Output settings
    tsv_include_header: bool = True
    tsv_format_file: Optional[str] = None

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    log_file_max_bytes: int = 10485760
    log_file_backup_count: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"   # allow unknown env vars without error

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.validate_settings()

    def validate_settings(self):
        """Validate critical settings on startup"""
        errors = []

        # Validate environment
        if self.environment not in ["development", "testing", "production"]:
            errors.append(f"Invalid environment: {self.environment}")

        if self.context_window < 0:
            errors.append(f"Context window must be non-negative, got {self.context_window}")

        if self.index_cache_size < 1:
            errors.append(f"Index cache size must be at least 1, got {self.index_cache_size}")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            errors.append(f"Invalid log level: {self.log_level}. Valid options: {valid_levels}")

        if errors:
            raise ValueError(f"Configuration errors: {'; '.join(errors)}")


class SafeSettings:
    """Safe wrapper for settings with fallback defaults"""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._defaults = {
            "context_window": 30,
            "skip_invalid_terms": False,
            "index_cache_size": 8,
            "tsv_include_header": True,
            "tsv_format_file": None,
            "log_level": "INFO",
            "log_to_file": False,
            "log_dir": "logs",
            "log_file_max_bytes": 10485760,
            "log_file_backup_count": 10,
            "environment": "production",
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Safely get setting value with fallback"""
        value = getattr(self._settings, key, None)
        if value is None:
            value = self._defaults.get(key, default)
        return value

    def __getattr__(self, key: str) -> Any:
        """Proxy attribute access with safety"""
        return self.get(key)

    @property
    def raw(self) -> Settings:
        """Get raw settings object"""
        return self._settings

# Initialize settings with safety wrapper
_raw_settings = Settings()
settings = SafeSettings(_raw_settings)
