from __future__ import annotations

import json

from animcapture.core.metadata import CompressedIntent, Intent, IntentRecord
from animcapture.core.profiles import synthesize
from animcapture.logging.traces import TraceWriter
from tests.helpers import make_record


def test_trace_writer_appends_one_line_per_record(artifacts):
    writer = TraceWriter("session_1", artifacts)
    record = make_record(
        "button.cta",
        before_style={"opacity": "1"},
        after_style={"opacity": "0.5"},
        before_classes=("btn",),
        after_classes=("btn", "active"),
        timestamp=12.5,
    )
    writer.append_interaction(record)
    writer.append_intent(
        IntentRecord(timestamp=13.0, intent=CompressedIntent(Intent.CONTENT_UPDATE, "2 mutations on 1 elements", 1))
    )

    lines = writer.traces_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    interaction, mutation = writer.read_traces()
    assert interaction["type"] == "interaction"
    assert interaction["event"]["selector"] == "button.cta"
    assert interaction["diff"] == {"classes": {"added": ["active"], "removed": []}}
    assert interaction["style_diff"] == {"opacity": {"from": "1", "to": "0.5"}}
    assert interaction["before"]["style"]["computed"] == {"opacity": "1"}
    assert mutation["type"] == "mutation"
    assert mutation["mutation"]["intent"] == "content-update"
    assert mutation["mutation"]["affected_element_count"] == 1


def test_interaction_without_changes_has_null_diff(artifacts):
    writer = TraceWriter("session_2", artifacts)
    writer.append_interaction(make_record("a", before_style={"opacity": "1"}, after_style={"opacity": "1"}))
    [interaction] = writer.read_traces()
    assert interaction["diff"] is None
    assert interaction["style_diff"] == {}


def test_profiles_are_written_as_json(artifacts):
    writer = TraceWriter("session_3", artifacts)
    profiles = synthesize(
        [make_record("button.cta", before_style={"opacity": "1"}, after_style={"opacity": "0.5"})]
    )
    path = writer.write_profiles(profiles)
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["session_id"] == "session_3"
    assert payload["profiles"] == [
        {
            "name": "click-on-cta",
            "trigger": {"event_kind": "click", "selector": "button.cta"},
            "effect": {
                "type": "transition",
                "target": "button.cta",
                "properties": {"opacity": {"from": "1", "to": "0.5"}},
            },
        }
    ]
    assert writer.session_dir == artifacts.root / "session_3"


def test_dom_snapshots_land_in_the_session_directory(artifacts):
    path = artifacts.write_dom_snapshot("session_4", "landing", "<html></html>", timestamp="20260101T000000Z")
    assert path.name == "20260101T000000Z_landing.html"
    assert path.parent.name == "dom_snapshots"
    assert path.parent.parent == artifacts.root / "session_4"
    assert path.read_text(encoding="utf-8") == "<html></html>"


def test_session_directory_holds_no_snapshot_folder_until_one_is_written(artifacts):
    writer = TraceWriter("session_5", artifacts)
    assert not (writer.session_dir / "dom_snapshots").exists()
    writer.write_dom_snapshot("stop", "<html></html>")
    assert len(list((writer.session_dir / "dom_snapshots").iterdir())) == 1
