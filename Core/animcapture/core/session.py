from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable

from animcapture.config.schema import CaptureConfig
from animcapture.core.exceptions import UnknownCaptureToken
from animcapture.core.metadata import (
    AnimationProfile,
    CaptureToken,
    CompressedIntent,
    ElementSnapshot,
    InteractionEvent,
    InteractionRecord,
    IntentRecord,
    MutationBatch,
    MutationNotification,
    NetworkRequest,
    StyleSnapshot,
)
from animcapture.core.mutations import compress, summarize_changes
from animcapture.core.profiles import synthesize
from animcapture.core.selectors import SelectorResolver
from animcapture.core.snapshot import SnapshotCapturer
from animcapture.dom.protocol import ElementHandle

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _PendingCapture:
    timestamp: float
    event: InteractionEvent
    selector: str
    structural: ElementSnapshot | None
    style: StyleSnapshot | None


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class CaptureSession:
    """Owns the state of one capture session.

    Interactions are recorded in two phases: ``capture_before`` at event time
    and ``capture_after`` once the caller has waited the settle delay.
    """

    def __init__(
        self,
        config: CaptureConfig | None = None,
        session_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or CaptureConfig()
        self.session_id = session_id or new_session_id()
        self.clock = clock
        self.resolver = SelectorResolver(self.config.selector)
        self.capturer = SnapshotCapturer(self.resolver, self.config.snapshot)
        self._pending: dict[str, _PendingCapture] = {}
        self._records: list[InteractionRecord] = []
        self._intents: list[IntentRecord] = []
        self._network: list[NetworkRequest] = []

    @property
    def records(self) -> list[InteractionRecord]:
        return list(self._records)

    @property
    def intents(self) -> list[IntentRecord]:
        return list(self._intents)

    @property
    def network(self) -> list[NetworkRequest]:
        return list(self._network)

    @property
    def settle_delay_seconds(self) -> float:
        return self.config.settle_delay_seconds

    def capture_before(self, element, event: InteractionEvent) -> CaptureToken:
        captured = self.capturer.capture(element)
        structural, style = captured if captured else (None, None)
        selector = structural.selector if structural else self._safe_selector(element)
        token = CaptureToken(token_id=uuid.uuid4().hex)
        self._pending[token.token_id] = _PendingCapture(
            timestamp=self.clock(),
            event=event,
            selector=selector,
            structural=structural,
            style=style,
        )
        return token

    def capture_after(self, token: CaptureToken, element) -> InteractionRecord:
        pending = self._pending.pop(token.token_id, None)
        if pending is None:
            raise UnknownCaptureToken(token.token_id)
        structural = self.capturer.capture_structural(element, selector=pending.selector)
        style = self.capturer.capture_style(element, selector=pending.selector)
        record = InteractionRecord(
            timestamp=pending.timestamp,
            event_kind=pending.event.kind,
            selector=pending.selector,
            coordinates=pending.event.coordinates,
            value=pending.event.value,
            key=pending.event.key,
            before_structural=pending.structural,
            before_style=pending.style,
            after_structural=structural,
            after_style=style,
        )
        self._records.append(record)
        log.debug("Recorded %s on %s", record.event_kind, record.selector)
        return record

    def record_interaction(
        self,
        element,
        event: InteractionEvent,
        sleep: Callable[[float], None] = time.sleep,
    ) -> InteractionRecord:
        token = self.capture_before(element, event)
        sleep(self.settle_delay_seconds)
        return self.capture_after(token, element)

    def record_mutations(self, batch: MutationBatch) -> CompressedIntent:
        intent = compress(batch)
        if intent.affected_element_count > 0:
            timestamp = batch.timestamp if batch.timestamp is not None else self.clock()
            changes = summarize_changes(batch, describe=self._describe_target)
            self._intents.append(IntentRecord(timestamp=timestamp, intent=intent, changes=changes))
        return intent

    def record_network(self, request: NetworkRequest) -> None:
        self._network.append(request)
        log.debug("Recorded %s %s (%s)", request.method, request.url, request.status)

    def extract_profiles(self) -> list[AnimationProfile]:
        profiles = synthesize(self._records, self.config.snapshot.style_properties)
        log.info("Session %s: %d profiles from %d interactions", self.session_id, len(profiles), len(self._records))
        return profiles

    def _safe_selector(self, element) -> str:
        if isinstance(element, ElementHandle):
            return self.resolver.generate(element)
        return "unknown"

    def _describe_target(self, notification: MutationNotification) -> str | None:
        if isinstance(notification.element, ElementHandle):
            return self.resolver.generate(notification.element)
        return None
