"""Configuration management for the HyperCards client.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the HYPERCARDS_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (HYPERCARDS_* prefix)
2. .env file in the project root
3. Default values defined in HypercardsConfig

Example .env file:
    HYPERCARDS_API_BASE_URL=https://cards.example.com/api
    HYPERCARDS_POLL_INTERVAL_SECONDS=5
    HYPERCARDS_DATA_DIR=data

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from hypercards.core.config import config

    print(config.api_base_url)
    print(config.poll_interval_seconds)

Backend Paths
-------------
The ``*_path`` settings are relative to ``api_base_url`` and may contain a
single ``{job_id}`` or ``{resource_id}`` placeholder:

- submit_path: Creation request (payment header + theme)
- status_path: Job status polling
- resource_path: Target resource metadata (price lookup)
- asset_path: Banner/asset generation for a completed job
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HypercardsConfig(BaseSettings):
    """Main configuration for the HyperCards client.

    Values are loaded from environment variables with the HYPERCARDS_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Backend:
        api_base_url : str
            Base URL of the generation service
        submit_path, status_path, resource_path, asset_path : str
            Endpoint paths relative to api_base_url

    Timing:
        poll_interval_seconds : float
            Fixed interval between status polls (no backoff)
        request_timeout_seconds : float
            Timeout for submit, status and metadata requests
        asset_timeout_seconds : float
            Timeout for asset generation (image synthesis is slow)

    Generation:
        length_mode : Literal["short", "medium", "long"]
            Requested output length sent with every submission
        generation_mode : str
            Generation pipeline requested from the backend
        asset_enhance : bool
            Ask the backend for enhanced (themed) asset generation

    Paths:
        data_dir : Path
            Directory for client-side records (created on init)
        access_store_filename : str
            File name of the ancillary access record inside data_dir

    Examples
    --------
        >>> custom_config = HypercardsConfig(
        ...     api_base_url="http://localhost:8000",
        ...     poll_interval_seconds=1.0,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HYPERCARDS_",
        case_sensitive=False,
    )

    # Backend endpoints
    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the generation service",
    )
    submit_path: str = Field(
        default="/hyperblogs/purchase",
        description="Path for creation requests",
    )
    status_path: str = Field(
        default="/hyperblogs/{job_id}",
        description="Path for job status polling",
    )
    resource_path: str = Field(
        default="/datarooms/{resource_id}",
        description="Path for target resource metadata",
    )
    asset_path: str = Field(
        default="/hypercards/{job_id}/image",
        description="Path for asset generation of a completed job",
    )

    # Timing
    poll_interval_seconds: float = Field(
        default=5.0,
        description="Fixed interval between status polls",
        gt=0,
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for submit/status/metadata requests",
        gt=0,
    )
    asset_timeout_seconds: float = Field(
        default=90.0,
        description="Timeout for asset generation requests",
        gt=0,
    )

    # Generation settings
    length_mode: Literal["short", "medium", "long"] = Field(
        default="short",
        description="Requested output length (cards are short, single node)",
    )
    generation_mode: str = Field(
        default="card",
        description="Generation pipeline requested from the backend",
    )
    asset_enhance: bool = Field(
        default=True,
        description="Request enhanced asset generation",
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for client-side records",
    )
    access_store_filename: str = Field(
        default="ancillary_access.json",
        description="File name of the ancillary access record",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def access_store_path(self) -> Path:
        """Full path of the ancillary access record file."""
        return self.data_dir / self.access_store_filename


# Global configuration instance
# Loads values from environment variables (HYPERCARDS_* prefix) and .env file.
config = HypercardsConfig()
