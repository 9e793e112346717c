from __future__ import annotations

from typing import Any, Callable, Iterable

from animcapture.core.metadata import (
    CompressedIntent,
    Intent,
    MutationBatch,
    MutationKind,
    MutationNotification,
)

MAX_CHANGE_SUMMARIES = 5


def compress(batch: MutationBatch | Iterable[MutationNotification]) -> CompressedIntent:
    """Classifies a burst of mutations into a coarse intent."""

    notifications = list(batch)
    affected = {notification.target for notification in notifications}
    has_class_change = False
    has_child_list_change = False
    has_other_attribute_change = False

    for notification in notifications:
        if notification.kind == MutationKind.CHILD_LIST:
            has_child_list_change = True
        elif notification.kind == MutationKind.ATTRIBUTES:
            if notification.attribute_name == "class":
                has_class_change = True
            else:
                has_other_attribute_change = True

    if has_class_change and not has_child_list_change:
        intent = Intent.STYLE_CHANGE
    elif has_child_list_change and len(affected) == 1:
        intent = Intent.CONTENT_UPDATE
    elif has_child_list_change and len(affected) > 1:
        intent = Intent.DOM_RESTRUCTURE
    elif has_other_attribute_change:
        intent = Intent.ATTRIBUTE_CHANGE
    else:
        intent = Intent.UNKNOWN

    return CompressedIntent(
        intent=intent,
        summary=f"{len(notifications)} mutations on {len(affected)} elements",
        affected_element_count=len(affected),
    )


def notification_from_raw(
    item: dict[str, Any],
    wrap: Callable[[Any], Any] | None = None,
) -> MutationNotification:
    """Builds a notification from one entry of the in-page mutation buffer.

    ``wrap`` turns the raw target reference into an element handle so the
    change can later be described by selector.
    """

    element = item.get("target")
    if element is not None and wrap is not None:
        element = wrap(element)
    return MutationNotification(
        kind=MutationKind(item.get("type", MutationKind.ATTRIBUTES.value)),
        target=item.get("targetId"),
        attribute_name=item.get("attributeName") or None,
        target_tag=item.get("targetTag", ""),
        added_count=int(item.get("addedCount", 0)),
        removed_count=int(item.get("removedCount", 0)),
        old_value=item.get("oldValue"),
        element=element,
    )


def group_batches(
    raw_events: Iterable[dict[str, Any]],
    wrap: Callable[[Any], Any] | None = None,
) -> list[MutationBatch]:
    """Splits flushed mutation entries into batches, one per observer callback."""

    batches: list[MutationBatch] = []
    current: list[MutationNotification] = []
    current_id: int | None = None
    current_ts: float | None = None
    for item in raw_events:
        batch_id = item.get("batch")
        if current and batch_id != current_id:
            batches.append(MutationBatch(tuple(current), batch_id=current_id, timestamp=current_ts))
            current = []
        if not current:
            current_id = batch_id
            current_ts = item.get("timestamp")
        current.append(notification_from_raw(item, wrap))
    if current:
        batches.append(MutationBatch(tuple(current), batch_id=current_id, timestamp=current_ts))
    return batches


def summarize_changes(
    batch: MutationBatch,
    limit: int = MAX_CHANGE_SUMMARIES,
    describe: Callable[[MutationNotification], str | None] | None = None,
) -> tuple[dict[str, Any], ...]:
    summaries = []
    for notification in batch.notifications[:limit]:
        summaries.append(
            {
                "type": str(notification.kind),
                "selector": describe(notification) if describe else None,
                "target_tag": notification.target_tag,
                "attribute_name": notification.attribute_name,
                "old_value": notification.old_value,
                "added_nodes": notification.added_count,
                "removed_nodes": notification.removed_count,
            }
        )
    return tuple(summaries)
