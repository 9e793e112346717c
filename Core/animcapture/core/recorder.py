from __future__ import annotations

import logging
import time
from typing import Any

from selenium.common.exceptions import WebDriverException

from animcapture.core.dom_monitor import DomMonitor
from animcapture.core.metadata import AnimationProfile, InteractionEvent, InteractionRecord, NetworkRequest
from animcapture.core.mutations import group_batches
from animcapture.core.session import CaptureSession
from animcapture.dom.webdriver import RecordedElement, SeleniumDocument, SeleniumElement
from animcapture.logging.traces import TraceWriter
from animcapture.utils.wait import wait_until

log = logging.getLogger(__name__)

ALWAYS_RECORDED_KINDS = frozenset({"click", "submit"})


def has_visible_change(raw: dict[str, Any]) -> bool:
    before = raw.get("before") or {}
    after = raw.get("after") or {}
    return before.get("styles") != after.get("styles") or before.get("classes") != after.get("classes")


def event_from_raw(raw: dict[str, Any]) -> InteractionEvent:
    return InteractionEvent(
        kind=raw.get("kind", "click"),
        x=raw.get("x"),
        y=raw.get("y"),
        value=raw.get("value"),
        key=raw.get("key"),
    )


def network_from_raw(raw: dict[str, Any]) -> NetworkRequest:
    return NetworkRequest(
        url=str(raw.get("url", "")),
        method=str(raw.get("method") or "GET"),
        status=int(raw.get("status") or 0),
        timing_ms=float(raw.get("timing") or 0),
        timestamp=raw.get("ts"),
    )


class LiveRecorder:
    """Drains the in-page buffers of a WebDriver session into a capture session."""

    def __init__(
        self,
        driver,
        session: CaptureSession,
        monitor: DomMonitor | None = None,
        writer: TraceWriter | None = None,
    ) -> None:
        self.driver = driver
        self.session = session
        self.document = SeleniumDocument(driver)
        self.monitor = monitor or DomMonitor(
            settle_delay_ms=session.config.settle_delay_ms,
            style_properties=session.config.snapshot.style_properties,
        )
        self.writer = writer
        self.poll_interval = session.config.browser.poll_interval_seconds

    def start(self) -> None:
        self.monitor.install(self.driver)
        self._save_page("start")
        log.info("Recording session %s", self.session.session_id)

    def poll(self) -> list[InteractionRecord]:
        records: list[InteractionRecord] = []
        for raw in self.monitor.flush_interactions(self.driver):
            record = self._record(raw)
            if record is not None:
                records.append(record)
        for batch in group_batches(self.monitor.flush_mutations(self.driver), wrap=self._wrap):
            before = len(self.session.intents)
            self.session.record_mutations(batch)
            if self.writer and len(self.session.intents) > before:
                self.writer.append_intent(self.session.intents[-1])
        for raw in self.monitor.flush_network(self.driver):
            request = network_from_raw(raw)
            self.session.record_network(request)
            if self.writer:
                self.writer.append_network(request)
        return records

    def record_for(self, seconds: float) -> list[InteractionRecord]:
        deadline = time.monotonic() + seconds
        records: list[InteractionRecord] = []
        while time.monotonic() < deadline:
            records.extend(self.poll())
            time.sleep(self.poll_interval)
        records.extend(self.poll())
        return records

    def wait_for_interactions(self, count: int, timeout: float) -> list[InteractionRecord]:
        collected: list[InteractionRecord] = []

        def enough() -> bool:
            collected.extend(self.poll())
            return len(collected) >= count

        wait_until(enough, timeout, interval=self.poll_interval)
        return collected

    def stop(self) -> list[AnimationProfile]:
        self.poll()
        self.monitor.uninstall(self.driver)
        self._save_page("stop")
        profiles = self.session.extract_profiles()
        if self.writer:
            self.writer.write_profiles(profiles)
        return profiles

    def _wrap(self, web_element) -> SeleniumElement:
        return SeleniumElement(self.document, web_element)

    def _record(self, raw: dict[str, Any]) -> InteractionRecord | None:
        target = raw.get("target")
        if target is None:
            log.debug("Dropping %s on a detached element", raw.get("kind"))
            return None
        if raw.get("kind") not in ALWAYS_RECORDED_KINDS and not has_visible_change(raw):
            log.debug("Ignoring %s without visible change", raw.get("kind"))
            return None
        live = self._wrap(target)
        token = self.session.capture_before(RecordedElement(raw.get("before") or {}, live), event_from_raw(raw))
        record = self.session.capture_after(token, RecordedElement(raw.get("after") or {}, live))
        if self.writer:
            self.writer.append_interaction(record)
        return record

    def _save_page(self, label: str) -> None:
        if not self.writer:
            return
        try:
            page_source = self.driver.page_source
        except WebDriverException as exc:
            log.warning("Could not read the page source for the %s snapshot: %s", label, exc)
            return
        self.writer.write_dom_snapshot(label, page_source)
