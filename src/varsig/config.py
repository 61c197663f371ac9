"""Configuration management for the varsig command-line tool."""

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator


class CryptoConfig(BaseModel):
    """Cryptographic defaults."""

    default_algorithm: str = "ed25519"
    rsa_key_size: int = 2048

    @field_validator("rsa_key_size")
    @classmethod
    def _check_key_size(cls, value: int) -> int:
        if value < 1024 or value % 256:
            raise ValueError("rsa_key_size must be a multiple of 256 and at least 1024")
        return value


class OutputConfig(BaseModel):
    """Output formatting."""

    hex_uppercase: bool = False


class VarsigConfig(BaseModel):
    """Complete tool configuration."""

    crypto: CryptoConfig = CryptoConfig()
    output: OutputConfig = OutputConfig()
    log_level: str = "WARNING"

    def format_hex(self, data: bytes) -> str:
        text = data.hex()
        return text.upper() if self.output.hex_uppercase else text


def _suffix_format(config_path: Path) -> str:
    if config_path.suffix in (".yaml", ".yml"):
        return "yaml"
    if config_path.suffix == ".json":
        return "json"
    raise ValueError(f"Unsupported config format: {config_path.suffix}")


def _dump(data: dict, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    raise ValueError(f"Unsupported format: {fmt}")


def load_config(config_path: Path) -> VarsigConfig:
    """Read ``varsig-cli`` settings from a ``.yaml``/``.yml`` or ``.json`` file.

    Sections missing from the file keep their defaults, and an empty file
    gives the default configuration. Unknown suffixes raise ``ValueError``
    before the file is parsed.
    """
    config_path = Path(config_path)
    fmt = _suffix_format(config_path)
    with open(config_path) as f:
        data = yaml.safe_load(f) if fmt == "yaml" else json.load(f)

    return VarsigConfig(**(data or {}))


def save_config(config: VarsigConfig, config_path: Path) -> None:
    """Write settings in the format implied by the file suffix."""
    config_path = Path(config_path)
    config_path.write_text(_dump(config.model_dump(), _suffix_format(config_path)))


def generate_default_config(format: str = "yaml") -> str:
    """Render the default settings, as written by ``varsig-cli init-config``."""
    return _dump(VarsigConfig().model_dump(), format)
