"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from mdsite.core.limits import Limits


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:                str = "mdsite"
    parser_config:           str = Field(default="gfm-like",  description="MarkdownIt parser preset name")
    excerpt_length:          int = Field(default=500,        gt=0, description="Excerpt bound for full parses")
    metadata_excerpt_length: int = Field(default=200,        gt=0, description="Excerpt bound for metadata-only parses")
    enable_streaming:        bool = Field(default=True,      description="Stream files above streaming_threshold")
    streaming_threshold:     int = Field(default=1_048_576,  gt=0, description="File size in bytes above which to stream")
    chunk_size:              int = Field(default=65_536,     gt=0, description="Streaming read size in bytes")
    trusted_content:         bool = Field(default=False,     description="Skip the dangerous-pattern source gate")
    log_level:               str = Field(default="WARNING",  pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    limits:                  Limits = Field(default_factory=Limits)


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if name == "limits":
            continue
        if val := os.getenv(f"MDSITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
