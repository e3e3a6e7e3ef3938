"""
settings.py

This module provides configuration management for the Balsa engine.

Features:
- Centralized engine configuration using Pydantic settings
- Constants for engine-wide use
- A shared rich console for command line output

Usage:
Import appsettings for configuration values.
"""

from typing import Final, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

# Console instance for rich output
console: Final[Console] = Console()

DEFAULT_MAX_TEMPLATE_BYTES: Final[int] = 1024 * 1024


class App(BaseSettings):
    """
    Engine settings model.

    Settings can be overridden through environment variables with BALSA_ prefix.

    Attributes:
        beQuiet: Suppress pipeline logging output
        detailedOutput: Show offsets and full metadata in command output
        mergePolicy: How repeated placeholders for one variable merge metadata.
            "permissive" fills in missing fields and lets the last default win;
            "strict" rejects any disagreement.
        unknownOverrides: What to do with an override naming no declared
            variable: "ignore" (log and drop) or "error".
        maxTemplateBytes: Largest template file accepted by Template.from_file
    """

    beQuiet: bool = False
    detailedOutput: bool = False
    mergePolicy: Literal["permissive", "strict"] = "permissive"
    unknownOverrides: Literal["ignore", "error"] = "ignore"
    maxTemplateBytes: int = DEFAULT_MAX_TEMPLATE_BYTES

    model_config = SettingsConfigDict(
        env_prefix="BALSA_",
        case_sensitive=False,
        extra="ignore",
    )


# Create the engine settings instance
appsettings: Final[App] = App()
