from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEFAULT_PREFERRED_ATTRIBUTES = [
    "id",
    "data-testid",
    "data-test",
    "data-id",
    "name",
    "aria-label",
    "role",
    "type",
    "href",
    "for",
]

DEFAULT_IGNORED_PATTERNS = [
    "data-reactid",
    "data-react-checksum",
    "data-v-",
    "data-svelte-",
    "_ngcontent-",
    "_nghost-",
    "data-emotion-",
    "data-styled-",
    "ng-reflect-",
]

DEFAULT_VALUE_PREFIXES = ["react-", "vue-", "ng-", "svelte-"]

DEFAULT_STYLE_PROPERTIES = [
    "display",
    "visibility",
    "opacity",
    "transform",
    "transition",
    "animation",
    "position",
    "top",
    "left",
    "right",
    "bottom",
    "width",
    "height",
    "z-index",
    "overflow",
    "clip-path",
    "filter",
    "backdrop-filter",
]


class SelectorSettings(BaseModel):
    preferred_attributes: list[str] = Field(default_factory=lambda: list(DEFAULT_PREFERRED_ATTRIBUTES))
    ignored_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_PATTERNS))
    value_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_VALUE_PREFIXES))
    max_depth: int = Field(default=5, ge=1)

    @field_validator("preferred_attributes")
    @classmethod
    def validate_preferred_attributes(cls, value: list[str]) -> list[str]:
        normalized = [item.strip().lower() for item in value if item.strip()]
        if not normalized:
            raise ValueError("preferred_attributes must name at least one attribute")
        return normalized


class SnapshotSettings(BaseModel):
    style_properties: list[str] = Field(default_factory=lambda: list(DEFAULT_STYLE_PROPERTIES))
    max_markup_length: int = Field(default=500, ge=0)
    max_text_length: int = Field(default=200, ge=0)

    @field_validator("style_properties")
    @classmethod
    def validate_style_properties(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for item in value:
            name = item.strip().lower()
            if name and name not in normalized:
                normalized.append(name)
        if not normalized:
            raise ValueError("style_properties must not be empty")
        return normalized


class BrowserSettings(BaseModel):
    browser: str = "chrome"
    headless: bool = False
    page_load_timeout_seconds: int = Field(default=60, gt=0)
    window_width: int = Field(default=1440, gt=0)
    window_height: int = Field(default=1200, gt=0)
    poll_interval_seconds: float = Field(default=0.2, gt=0)

    @field_validator("browser")
    @classmethod
    def validate_browser(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"chrome", "firefox"}:
            raise ValueError(f"Unsupported browser: {value}")
        return normalized


class CaptureConfig(BaseModel):
    settle_delay_ms: int = Field(default=50, ge=0)
    output_dir: str = "captures"
    selector: SelectorSettings = Field(default_factory=SelectorSettings)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)

    @property
    def settle_delay_seconds(self) -> float:
        return self.settle_delay_ms / 1000.0
