from __future__ import annotations

import pytest

from animcapture.config.schema import CaptureConfig
from animcapture.core.selectors import SelectorResolver
from animcapture.core.snapshot import SnapshotCapturer
from animcapture.dom.soup import SoupDocument
from animcapture.logging.artifacts import ArtifactManager
from tests.helpers import LANDING_PAGE_HTML


@pytest.fixture()
def capture_config():
    return CaptureConfig.model_validate({"settle_delay_ms": 50, "browser": {"headless": True}})


@pytest.fixture()
def landing_page():
    return SoupDocument(LANDING_PAGE_HTML)


@pytest.fixture()
def resolver(capture_config):
    return SelectorResolver(capture_config.selector)


@pytest.fixture()
def capturer(resolver, capture_config):
    return SnapshotCapturer(resolver, capture_config.snapshot)


@pytest.fixture()
def artifacts(tmp_path):
    return ArtifactManager(tmp_path / "captures")
