"""
fluidfetch Settings
===================

Immutable runtime configuration, built once at startup and passed into each
component. Values come from (highest precedence first):

1. explicit keyword overrides (used by tests and the CLI)
2. an optional YAML config file
3. ``FLUIDS_*`` environment variables
4. the defaults below
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fluidfetch._version import __version__
from fluidfetch.exceptions import UsageError
from fluidfetch.units import UnitSelection, parse_unit_override

logger = logging.getLogger(__name__)


class FluidsSettings(BaseSettings):
    """Settings for the WebBook client, catalogue cache and output files."""

    data_url: str = Field(
        default="https://webbook.nist.gov/cgi/fluid.cgi",
        description="Fluid property calculation endpoint",
    )
    catalogue_url: str = Field(
        default="https://webbook.nist.gov/chemistry/fluid/",
        description="Substance selection page scraped for the catalogue",
    )
    source_citation: str = Field(
        default="NIST Chemistry WebBook (https://webbook.nist.gov/chemistry/)",
        description="Provenance line written to every output file",
    )
    catalogue_path: Path = Field(
        default_factory=lambda: Path.home() / ".fluids",
        description="Local catalogue file (ID:Name per line)",
    )
    catalogue_max_age: float = Field(
        default=86400.0,
        gt=0,
        description="Catalogue age in seconds after which it is refreshed",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for every HTTP request",
    )
    user_agent: str = Field(
        default=f"fluidfetch/{__version__}",
        description="User-Agent header sent to the WebBook",
    )
    output_prefix: str = Field(
        default="fluids",
        min_length=1,
        description="Prefix of the default output file name",
    )
    default_units: str = Field(
        default="1 2 3 1 1 2 1",
        description="Unit codes used when neither --si nor --units is given",
    )
    default_increment: float = Field(default=1.0, gt=0)
    default_digits: int = Field(default=5, ge=1)
    default_ref_state: str = Field(default="DEF", min_length=1)

    model_config = SettingsConfigDict(
        env_prefix="FLUIDS_",
        frozen=True,
        extra="forbid",
    )

    @field_validator("default_units")
    @classmethod
    def validate_default_units(cls, v: str) -> str:
        """Reject default unit codes that would fail at request time."""
        try:
            parse_unit_override(v)
        except UsageError as e:
            raise ValueError(str(e)) from e
        return v

    @field_validator("catalogue_path")
    @classmethod
    def expand_catalogue_path(cls, v: Path) -> Path:
        return Path(v).expanduser()

    def default_selection(self) -> UnitSelection:
        return parse_unit_override(self.default_units)


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    """Load a YAML mapping of setting names to values."""
    if not config_file.exists():
        raise UsageError(f"Config file not found: {config_file}", context={"path": str(config_file)})

    with open(config_file, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise UsageError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise UsageError(f"Config file {config_file} must contain a mapping")
    return data


def load_settings(config_file: Optional[Path | str] = None, **overrides: Any) -> FluidsSettings:
    """Build the settings object for one invocation.

    Args:
        config_file: Optional YAML file with setting values
        **overrides: Values taking precedence over file and environment

    Raises:
        UsageError: for unreadable files or invalid values
    """
    values: Dict[str, Any] = {}
    if config_file is not None:
        config_file = Path(config_file)
        values.update(_read_config_file(config_file))
        logger.info(f"Config loaded from file: {config_file}")
    values.update(overrides)

    try:
        return FluidsSettings(**values)
    except ValidationError as e:
        raise UsageError(f"Invalid configuration: {e}") from e
