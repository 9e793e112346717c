from __future__ import annotations

import json
import os
from pathlib import Path

from animcapture.config.schema import CaptureConfig

CONFIG_ENV_VAR = "ANIMCAPTURE_CONFIG"


class ConfigLoader:
    """Loads and validates the JSON capture configuration."""

    @staticmethod
    def load(path: str | Path) -> CaptureConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return CaptureConfig.model_validate(payload)

    @classmethod
    def load_or_default(cls, path: str | Path | None = None) -> CaptureConfig:
        """Loads ``path``, then ``$ANIMCAPTURE_CONFIG``, else returns the defaults."""

        candidate = path or os.getenv(CONFIG_ENV_VAR)
        if not candidate:
            return CaptureConfig()
        return cls.load(candidate)
