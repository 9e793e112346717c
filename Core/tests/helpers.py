from __future__ import annotations

import itertools
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

import pytest
from selenium.common.exceptions import WebDriverException

from animcapture.core.browser import BrowserSession
from animcapture.core.dom_monitor import (
    CONNECT_OBSERVER_SCRIPT,
    DROP_BUFFER_SCRIPT,
    INSTALL_MONITOR_SCRIPT,
    INTERACTION_BUFFER,
    MUTATION_BUFFER,
    NETWORK_BUFFER,
    READ_BUFFER_SCRIPT,
    UNINSTALL_MONITOR_SCRIPT,
)
from animcapture.core.metadata import ElementSnapshot, InteractionRecord, StyleSnapshot
from animcapture.core.recorder import LiveRecorder
from animcapture.core.session import CaptureSession
from animcapture.dom.webdriver import IS_DOCUMENT_ROOT_SCRIPT, PARENT_SCRIPT, SAME_TAG_POSITION_SCRIPT
from animcapture.logging.artifacts import ArtifactManager
from animcapture.logging.traces import TraceWriter

LANDING_PAGE_HTML = """<!DOCTYPE html>
<html>
<body>
  <header class="site-header">
    <nav>
      <a href="/pricing" class="nav-link">Pricing</a>
      <a href="/docs" class="nav-link">Docs</a>
    </nav>
  </header>
  <main>
    <button class="btn cta" style="transform: scale(1); opacity: 1">Get started</button>
    <button class="btn css-1a2b3c4d">Secondary</button>
    <button id="react-submit" type="submit">Submit</button>
    <input data-testid="email" name="email">
    <div class="card featured">One</div>
    <div class="card featured">Two</div>
    <div class="card">Three</div>
    <ul><li>first</li><li>second</li><li>third</li></ul>
    <span class="x1 99">plain</span>
    <div data-reactid=".0.1" class="sc-a1b2c3d4e5 data-v-123abc item" aria-hidden="true" style="display: block"> Hello <b>world</b> </div>
    <div class="w-1/2">half</div>
  </main>
</body>
</html>
"""


def make_record(
    selector: str,
    kind: str = "click",
    before_style: dict[str, str] | None = None,
    after_style: dict[str, str] | None = None,
    before_classes: tuple[str, ...] = (),
    after_classes: tuple[str, ...] | None = None,
    timestamp: float = 0.0,
) -> InteractionRecord:
    after_classes = before_classes if after_classes is None else after_classes
    return InteractionRecord(
        timestamp=timestamp,
        event_kind=kind,
        selector=selector,
        before_structural=ElementSnapshot(selector=selector, html="", classes=before_classes),
        before_style=StyleSnapshot(selector=selector, computed=dict(before_style or {})),
        after_structural=ElementSnapshot(selector=selector, html="", classes=after_classes),
        after_style=StyleSnapshot(selector=selector, computed=dict(after_style or {})),
    )


class FakeWebElement:
    """Stands in for a Selenium WebElement inside FakeDriver."""

    def __init__(
        self,
        element_id: str,
        tag_name: str | None = None,
        parent: "FakeWebElement | None" = None,
        is_root: bool = False,
    ) -> None:
        self.id = element_id
        self.tag_name = tag_name or element_id
        self.parent = parent
        self.is_root = is_root
        self.connected = True

    def __eq__(self, other) -> bool:
        return isinstance(other, FakeWebElement) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)


class FakeDriver:
    """Answers the scripts the capture bridge sends to a page.

    Buffers behave like the in-page ones: reads leave them intact, detached
    targets come back as None, and a drop removes everything up to a sequence
    number.
    """

    def __init__(self) -> None:
        self.buffers: dict[str, list[dict[str, Any]]] = {
            INTERACTION_BUFFER: [],
            MUTATION_BUFFER: [],
            NETWORK_BUFFER: [],
        }
        self.selector_matches: dict[str, list[FakeWebElement]] = {}
        self.install_args: tuple[Any, ...] | None = None
        self.observer_connections = 0
        self.recording = False
        self.read_error: Exception | None = None
        self.page_source = "<html><body></body></html>"
        self._seq = itertools.count(1)

    @property
    def interactions(self) -> list[dict[str, Any]]:
        return self.buffers[INTERACTION_BUFFER]

    @interactions.setter
    def interactions(self, items: list[dict[str, Any]]) -> None:
        self.push(INTERACTION_BUFFER, items)

    @property
    def mutations(self) -> list[dict[str, Any]]:
        return self.buffers[MUTATION_BUFFER]

    @mutations.setter
    def mutations(self, items: list[dict[str, Any]]) -> None:
        self.push(MUTATION_BUFFER, items)

    @property
    def network(self) -> list[dict[str, Any]]:
        return self.buffers[NETWORK_BUFFER]

    @network.setter
    def network(self, items: list[dict[str, Any]]) -> None:
        self.push(NETWORK_BUFFER, items)

    def push(self, buffer: str, items: list[dict[str, Any]]) -> None:
        for item in items:
            self.buffers[buffer].append({**item, "seq": next(self._seq)})

    def find_elements(self, by, selector: str) -> list[FakeWebElement]:
        return list(self.selector_matches.get(selector, []))

    def execute_script(self, script: str, *args):
        if script == INSTALL_MONITOR_SCRIPT:
            self.install_args = args
            return None
        if script == CONNECT_OBSERVER_SCRIPT:
            self.observer_connections += 1
            self.recording = True
            return None
        if script == UNINSTALL_MONITOR_SCRIPT:
            self.recording = False
            return None
        if script == READ_BUFFER_SCRIPT:
            if self.read_error is not None:
                error, self.read_error = self.read_error, None
                raise error
            return [self._readable(item) for item in self.buffers[args[0]]]
        if script == DROP_BUFFER_SCRIPT:
            name, last_seq = args
            self.buffers[name] = [item for item in self.buffers[name] if item["seq"] > last_seq]
            return None
        if script == IS_DOCUMENT_ROOT_SCRIPT:
            return args[0].is_root
        if script == PARENT_SCRIPT:
            return args[0].parent
        if script == SAME_TAG_POSITION_SCRIPT:
            return [1, 1]
        raise AssertionError(f"Unexpected script: {script[:40]!r}")

    @staticmethod
    def _readable(item: dict[str, Any]) -> dict[str, Any]:
        target = item.get("target")
        if isinstance(target, FakeWebElement) and not target.connected:
            return {**item, "target": None}
        return dict(item)


def raw_state(tag: str, classes=(), styles=None, attributes=None, text: str = "") -> dict[str, Any]:
    return {
        "tag": tag,
        "attributes": dict(attributes or {}),
        "classes": list(classes),
        "html": f"<{tag}>{text}</{tag}>",
        "text": text,
        "styles": dict(styles or {}),
    }


@dataclass(slots=True)
class CaptureRuntime:
    driver: object
    session: CaptureSession
    recorder: LiveRecorder
    writer: TraceWriter


def require_browser_opt_in() -> None:
    if os.getenv("ANIMCAPTURE_BROWSER_TESTS") != "1":
        pytest.skip("Set ANIMCAPTURE_BROWSER_TESTS=1 to drive a real browser")


@contextmanager
def managed_runtime(capture_config, output_dir) -> Iterator[CaptureRuntime]:
    browser_session = BrowserSession(capture_config.browser)
    try:
        driver = browser_session.start()
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {capture_config.browser.browser}: {exc}")
    session = CaptureSession(capture_config)
    writer = TraceWriter(session.session_id, ArtifactManager(output_dir), capture_config.snapshot.style_properties)
    recorder = LiveRecorder(driver, session, writer=writer)
    try:
        yield CaptureRuntime(driver=driver, session=session, recorder=recorder, writer=writer)
    finally:
        driver.quit()
