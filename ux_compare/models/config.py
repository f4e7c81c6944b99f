"""Configuration models for the comparison tool."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ux_compare.errors import ConfigError
from ux_compare.url_utils import normalize_base_url

from .actions import Action


class _ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ViewportConfig(_ConfigModel):
    model_config = ConfigDict(frozen=True)

    name: str = "desktop"
    width: int = Field(default=1440, gt=0)
    height: int = Field(default=900, gt=0)
    device_scale_factor: float = Field(default=1, gt=0)


class PageConfig(_ConfigModel):
    name: str
    path: str = ""
    design_image: Optional[str] = None
    design_images: dict[str, str] = Field(default_factory=dict)
    actions: list[Action] = Field(default_factory=list)

    def design_for(self, viewport_name: str) -> Optional[str]:
        """Viewport-specific design first, then the shared legacy one."""
        return self.design_images.get(viewport_name) or self.design_image


class CompareConfig(_ConfigModel):
    # Target
    base_url: str = "http://localhost:8080/"

    # Output
    output_dir: str = "output"
    report_file: Optional[str] = "report.json"

    # Comparison thresholds
    threshold: float = Field(default=0.1, ge=0.0, le=1.0)  # per-pixel sensitivity
    failure_threshold: float = Field(default=0.5, ge=0.0, le=100.0)  # percent of pixels

    # Browser
    headless: bool = True
    navigation_timeout: int = 30000  # ms, for the per-page navigation

    viewports: list[ViewportConfig] = Field(
        default_factory=lambda: [ViewportConfig()]
    )
    global_actions: list[Action] = Field(default_factory=list)
    pages: list[PageConfig] = Field(default_factory=list)

    @field_validator("base_url")
    @classmethod
    def _trailing_slash(cls, v: str) -> str:
        return normalize_base_url(v)

    @model_validator(mode="after")
    def _unique_viewports(self) -> "CompareConfig":
        seen: set[str] = set()
        for viewport in self.viewports:
            if viewport.name in seen:
                raise ValueError(f"Duplicate viewport name: {viewport.name}")
            seen.add(viewport.name)
        return self

    @classmethod
    def load(cls, path: str | Path) -> "CompareConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config not found: {path}")
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read config {path}: {e}") from e
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}:\n{e}") from e

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(by_alias=True, exclude_none=True), f, indent=2)
