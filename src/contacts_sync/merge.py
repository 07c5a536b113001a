from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    ContactRecord,
    Insert,
    NoOp,
    ReconciliationAction,
    SyncOutcome,
    Update,
)

logger = logging.getLogger(__name__)


@dataclass
class FieldChanges:
    name: bool
    label: bool
    photo: bool

    @property
    def any(self) -> bool:
        return self.name or self.label or self.photo


def compare_records(existing: ContactRecord, incoming: ContactRecord) -> FieldChanges:
    return FieldChanges(
        name=existing.name != incoming.name,
        label=existing.phone_label != incoming.phone_label,
        photo=incoming.photo_uri is not None and existing.photo_uri != incoming.photo_uri,
    )


def merge_incoming(base: ContactRecord, incoming: ContactRecord) -> ContactRecord:
    """Overlay the source-owned fields of ``incoming`` on ``base``."""
    return base.replace(
        name=incoming.name,
        phone_label=incoming.phone_label,
        photo_uri=incoming.photo_uri if incoming.photo_uri is not None else base.photo_uri,
    )


def _plan_action(
    persisted: Optional[ContactRecord], target: ContactRecord, source: ContactRecord
) -> ReconciliationAction:
    if persisted is None:
        return Insert(record=target)
    if not compare_records(persisted, target).any:
        return NoOp(record=source, contact_id=persisted.contact_id)
    merged = merge_incoming(persisted, target)
    return Update(
        contact_id=persisted.contact_id,
        name=merged.name,
        phone_label=merged.phone_label,
        photo_uri=merged.photo_uri,
        record=merged,
    )


def index_by_key(records: Sequence[ContactRecord]) -> Dict[str, ContactRecord]:
    index: Dict[str, ContactRecord] = {}
    for record in records:
        key = record.normalized_key
        if key in index:
            logger.debug(
                "Duplicate stored key %s: contact %s shadows %s",
                key,
                record.contact_id,
                index[key].contact_id,
            )
        index[key] = record
    return index


def tally(actions: Sequence[ReconciliationAction]) -> SyncOutcome:
    inserted = sum(1 for action in actions if isinstance(action, Insert))
    updated = sum(1 for action in actions if isinstance(action, Update))
    return SyncOutcome(inserted=inserted, updated=updated)


def reconcile(
    source: Sequence[ContactRecord],
    existing: Sequence[ContactRecord],
    log: Optional[logging.Logger] = None,
) -> Tuple[List[ReconciliationAction], SyncOutcome]:
    """
    Compute the inserts and updates that bring ``existing`` in line with ``source``.

    One action is returned per source record, in source order. A normalized
    key is acted on at most once per run: when a later source record repeats
    a key, it is folded into the merged state held for that key, the first
    action for the key is recomputed against the stored record, and the later
    record gets a ``NoOp``. Nothing here touches the store.
    """
    log = log or logger
    persisted = index_by_key(existing)
    merged: Dict[str, ContactRecord] = {}
    origin: Dict[str, ContactRecord] = {}
    first_action: Dict[str, int] = {}
    actions: List[ReconciliationAction] = []

    for record in source:
        key = record.normalized_key
        if key in first_action:
            target = merge_incoming(merged[key], record)
            merged[key] = target
            index = first_action[key]
            stored = persisted.get(key)
            actions[index] = _plan_action(stored, target, origin[key])
            actions.append(NoOp(record=record, contact_id=stored.contact_id if stored else 0))
            log.debug("Folded repeated number %s into action #%d", key, index)
            continue

        merged[key] = record
        origin[key] = record
        first_action[key] = len(actions)
        actions.append(_plan_action(persisted.get(key), record, record))

    outcome = tally(actions)
    log.debug(
        "Reconciled %d source record(s) against %d stored: %s",
        len(source),
        len(existing),
        outcome.summary(),
    )
    return actions, outcome
