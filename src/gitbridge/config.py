"""Configuration models and loading for the git bridge."""

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from gitbridge.version import MIN_SUPPORTED_VERSION, ToolVersion

# Name of the config file inside the config directory
CONFIG_FILENAME = "config.toml"


class BridgeConfig(BaseModel):
    """Configuration for driving the git executable."""

    executable: str = "git"  # Name on PATH or absolute path
    timeout: float = Field(default=30, gt=0)  # Default command timeout in seconds
    minimum_version: str = str(MIN_SUPPORTED_VERSION)
    working_dir: str | None = None  # Default working directory for `run`
    echo_commands: bool = True  # Echo non-silent command lines to the console

    @field_validator("executable")
    @classmethod
    def validate_executable(cls, v: str) -> str:
        """Ensure the executable is not empty."""
        if not v.strip():
            raise ValueError("Executable cannot be empty")
        return v.strip()

    @field_validator("minimum_version")
    @classmethod
    def validate_minimum_version(cls, v: str) -> str:
        """Ensure the minimum version is parseable."""
        ToolVersion.parse(v)
        return v.strip()

    @property
    def minimum(self) -> ToolVersion:
        """The minimum supported version as a ToolVersion."""
        return ToolVersion.parse(self.minimum_version)

    @property
    def working_path(self) -> Path | None:
        """The default working directory as a Path."""
        return Path(self.working_dir).expanduser() if self.working_dir else None


def load_config(path: Path) -> BridgeConfig:
    """Load and validate a TOML configuration file.

    Settings may sit at the top level or under a [bridge] table.

    Args:
        path: Path to the TOML config file

    Returns:
        Validated BridgeConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        tomllib.TOMLDecodeError: If TOML is malformed
        pydantic.ValidationError: If config doesn't match schema
    """
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return BridgeConfig.model_validate(data.get("bridge", data))


def get_default_config_dir() -> Path:
    """Get the default configuration directory.

    Uses $GITBRIDGE_CONFIG_DIR if set, otherwise ~/.config/gitbridge.
    """
    if env_dir := os.environ.get("GITBRIDGE_CONFIG_DIR"):
        return Path(env_dir)
    return Path.home() / ".config" / "gitbridge"


def load_default_config() -> BridgeConfig:
    """Load the user's config file, falling back to defaults.

    $GITBRIDGE_EXECUTABLE overrides the configured executable.

    Returns:
        Validated BridgeConfig
    """
    path = get_default_config_dir() / CONFIG_FILENAME
    config = load_config(path) if path.exists() else BridgeConfig()

    if executable := os.environ.get("GITBRIDGE_EXECUTABLE", "").strip():
        config = config.model_copy(update={"executable": executable})
    return config
