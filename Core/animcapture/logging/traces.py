from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from animcapture.config.schema import DEFAULT_STYLE_PROPERTIES
from animcapture.core.diff import diff_structural, diff_style
from animcapture.core.metadata import (
    AnimationProfile,
    InteractionRecord,
    IntentRecord,
    NetworkRequest,
    style_diff_to_dict,
)
from animcapture.logging.artifacts import ArtifactManager


def interaction_payload(
    record: InteractionRecord,
    style_properties: Iterable[str] = DEFAULT_STYLE_PROPERTIES,
) -> dict[str, Any]:
    diff = diff_structural(record.before_structural, record.after_structural)
    payload: dict[str, Any] = {
        "type": "interaction",
        "ts": record.timestamp,
        "event": {
            "kind": record.event_kind,
            "selector": record.selector,
            "coordinates": list(record.coordinates) if record.coordinates else None,
            "value": record.value,
            "key": record.key,
        },
        "before": _snapshot_pair(record.before_structural, record.before_style),
        "after": _snapshot_pair(record.after_structural, record.after_style),
        "diff": diff.to_dict() if diff else None,
        "style_diff": style_diff_to_dict(diff_style(record.before_style, record.after_style, style_properties)),
    }
    return payload


def intent_payload(record: IntentRecord) -> dict[str, Any]:
    return {"type": "mutation", "ts": record.timestamp, "mutation": record.to_dict()}


def network_payload(request: NetworkRequest) -> dict[str, Any]:
    return {"type": "network", "ts": request.timestamp, "network": [request.to_dict()]}


class TraceWriter:
    """Persists interaction, mutation and network traces plus the final profile list."""

    def __init__(
        self,
        session_id: str,
        artifacts: ArtifactManager | None = None,
        style_properties: Iterable[str] = DEFAULT_STYLE_PROPERTIES,
    ) -> None:
        self.session_id = session_id
        self.style_properties = list(style_properties)
        self.artifacts = artifacts or ArtifactManager()
        self.session_dir = self.artifacts.session_dir(session_id)
        self.traces_path = self.session_dir / "traces.jsonl"
        self.profiles_path = self.session_dir / "profiles.json"

    def append_interaction(self, record: InteractionRecord) -> None:
        self._append(interaction_payload(record, self.style_properties))

    def append_intent(self, record: IntentRecord) -> None:
        self._append(intent_payload(record))

    def append_network(self, request: NetworkRequest) -> None:
        self._append(network_payload(request))

    def write_dom_snapshot(self, label: str, page_source: str) -> Path:
        return self.artifacts.write_dom_snapshot(self.session_id, label, page_source)

    def write_profiles(self, profiles: Iterable[AnimationProfile]) -> Path:
        payload = {
            "session_id": self.session_id,
            "profiles": [profile.to_dict() for profile in profiles],
        }
        self.profiles_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return self.profiles_path

    def read_traces(self) -> list[dict[str, Any]]:
        if not self.traces_path.exists():
            return []
        with self.traces_path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]

    def _append(self, payload: dict[str, Any]) -> None:
        with self.traces_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")


def _snapshot_pair(structural, style) -> dict[str, Any] | None:
    if structural is None and style is None:
        return None
    return {
        "dom": structural.to_dict() if structural else None,
        "style": style.to_dict() if style else None,
    }
