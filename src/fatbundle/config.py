"""fatbundle configuration management."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from fatbundle.errors import ConfigurationError

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".fatbundle"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "fatbundle.yaml"

SIGN_IDENTITY_ENV = "FATBUNDLE_SIGN_IDENTITY"


class ClassifierConfig(BaseModel):
    """Rules deciding which files are mergeable binaries."""
    # Shipped without execute bits but still Mach-O executables
    special_executables: list[str] = Field(default_factory=lambda: [
        "web_app_shortcut_copier",
        "nwjs Helper (Alerts)",
    ])
    # Single-architecture addons that have no counterpart to fuse against
    excluded_names: list[str] = Field(default_factory=lambda: [
        "greenworks-linux64.node",
        "greenworks-win64.node",
        "greenworks-win32.node",
        "greenworks-linux32.node",
    ])
    library_suffixes: list[str] = Field(default_factory=lambda: [".dylib", ".node"])
    script_suffixes: list[str] = Field(default_factory=lambda: [".sh"])


class TraversalConfig(BaseModel):
    """Configuration for walking the primary tree."""
    follow_symlinks: bool = True
    guard_cycles: bool = True  # Visit each real directory/file once


class FusionConfig(BaseModel):
    """Configuration for the fusion step."""
    verify: bool = True
    strict_inspection: bool = False
    copy_back: list[str] = Field(default_factory=lambda: [
        "v8_context_snapshot.x86_64.bin",
    ])


class ToolsConfig(BaseModel):
    """External tool locations."""
    backend: str = "lipo"
    lipo: str = "lipo"
    codesign: str = "codesign"


class SigningConfig(BaseModel):
    """Configuration for the optional final codesign step."""
    identity: str | None = None
    bundle_suffix: str = ".app"
    deep: bool = True
    verify: bool = True

    def model_post_init(self, __context: Any) -> None:
        """Apply environment variable fallback."""
        if self.identity is None:
            self.identity = os.getenv(SIGN_IDENTITY_ENV) or None


class FatBundleConfig(BaseModel):
    """Main fatbundle configuration."""
    version: str = "1.0"
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    traversal: TraversalConfig = Field(default_factory=TraversalConfig)
    fusion: FusionConfig = Field(default_factory=FusionConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    signing: SigningConfig = Field(default_factory=SigningConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def get_default_config() -> FatBundleConfig:
    """Get default configuration (NW.js bundle rules)."""
    return FatBundleConfig()


def load_config(config_path: Path | None = None) -> FatBundleConfig:
    """Load configuration from file or return defaults.

    Raises:
        ConfigurationError: The file is not valid YAML or does not match the schema.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if config_path.exists():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
            if data:
                return FatBundleConfig.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise ConfigurationError(f"Invalid config {config_path}: {e}") from e

    return get_default_config()


def save_config(config: FatBundleConfig, config_path: Path | None = None) -> None:
    """Save configuration to file."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump()
    # Never persist an identity picked up from the environment
    if data["signing"]["identity"] == os.getenv(SIGN_IDENTITY_ENV):
        data["signing"]["identity"] = None

    with open(config_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def get_config_path() -> Path:
    """Get the config file path."""
    return DEFAULT_CONFIG_FILE
