"""
Configuration settings for the workstation provisioner.
"""

import logging
from typing import List, Optional
from pathlib import Path
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from provisioner.integrations.winget import DEFAULT_SUCCESS_MARKERS
from provisioner.models.installation import InstallMode


class WingetConfig(BaseModel):
    """winget package manager configuration."""
    executable: str = Field(default="winget", description="winget binary name or path")
    source: Optional[str] = Field(default="winget", description="Source to install from")
    extra_args: List[str] = Field(default_factory=list, description="Extra install arguments")
    success_markers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SUCCESS_MARKERS),
        description="Output fragments accepted as success when the exit code is non-zero"
    )


class PowerShellConfig(BaseModel):
    """PowerShell module installer configuration."""
    executable: str = Field(default="pwsh", description="PowerShell binary name or path")
    scope: str = Field(default="CurrentUser", description="Install-Module scope")
    repository: str = Field(default="PSGallery", description="PowerShellGet repository")

    @field_validator('scope')
    @classmethod
    def validate_scope(cls, v):
        if v not in ("CurrentUser", "AllUsers"):
            raise ValueError("scope must be CurrentUser or AllUsers")
        return v


class OrchestratorConfig(BaseModel):
    """Installation orchestrator configuration."""
    mode: InstallMode = Field(default=InstallMode.SEQUENTIAL, description="Dispatch mode")
    max_concurrent_jobs: int = Field(default=4, ge=1, description="Maximum concurrent installs")
    item_timeout_seconds: Optional[float] = Field(
        default=None, gt=0, description="Per-item install timeout"
    )
    force_reinstall: bool = Field(default=False, description="Skip existence checks")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )
    file_path: Optional[Path] = Field(default=Path("logs/provisioner.log"))
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown logging level: {v}")
        return level


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_prefix="PROVISION_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    winget: WingetConfig = Field(default_factory=WingetConfig)
    powershell: PowerShellConfig = Field(default_factory=PowerShellConfig)
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
