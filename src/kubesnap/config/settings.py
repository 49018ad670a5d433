# config/settings.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from enum import Enum
import os
from dotenv import load_dotenv

# Load .env file explicitly
load_dotenv()


def _default_kubeconfig_dir() -> str:
    return os.path.join(os.getenv("HOME", os.path.expanduser("~")), ".kube") + os.sep


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


class KubernetesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="K8S_")

    kubeconfig_dir: str = Field(default_factory=_default_kubeconfig_dir, description="Directory scanned for kubeconfig files")
    kubeconfig_pattern: str = Field(r".*\.kubeconfig$", description="Regex a file name must match to count as a kubeconfig")
    kubectl_binary: str = Field("kubectl", description="kubectl executable")


class ExtractionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EXTRACTION_")

    output_root: str = Field("/cluster-logs/", description="Root directory for snapshot output")
    diff_mode: bool = Field(False, description="Write diffs instead of timestamped copies on repeat runs")
    max_concurrency: int = Field(10, ge=1, description="Maximum concurrently running extraction tasks")
    task_timeout_seconds: Optional[float] = Field(300, description="Per-task timeout, 0 or unset disables it")
    retry_attempts: int = Field(3, ge=1, description="Attempts for kubernetes API listing calls")
    fail_fast_on_client_error: bool = Field(False, description="Abort the whole run when a cluster client cannot be built")

    @field_validator('task_timeout_seconds', mode='after')
    @classmethod
    def normalize_timeout(cls, v):
        if v is not None and v <= 0:
            return None
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    debug: bool = Field(False, description="Debug mode")
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_format: LogFormat = Field(LogFormat.TEXT, description="Log format (json or text)")
    log_config: Optional[str] = Field(None, description="YAML logging config file")

    kubernetes: KubernetesSettings = Field(default_factory=lambda: KubernetesSettings())
    extraction: ExtractionSettings = Field(default_factory=lambda: ExtractionSettings())

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @field_validator('log_format', mode='before')
    @classmethod
    def validate_log_format(cls, v):
        if isinstance(v, str):
            return LogFormat(v.lower())
        return v

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()
