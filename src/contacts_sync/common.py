from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from .config_loader import SyncConfig, load_sync_config
from .errors import ConfigError, ContactSyncError, SourceError, StoreError
from .labels import PhoneType, classify, is_messaging_label
from .merge import FieldChanges, compare_records, reconcile
from .models import (
    UNKNOWN_NAME,
    ContactRecord,
    Insert,
    NoOp,
    RawContactTuple,
    ReconciliationAction,
    SyncError,
    SyncOutcome,
    SyncResult,
    SyncSuccess,
    Update,
)
from .normalization import (
    DEFAULT_MIN_PHONE_LENGTH,
    dial_format,
    dial_region,
    format_for_dialing,
    is_unclear_number,
    normalize,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigError",
    "ContactRecord",
    "ContactSyncError",
    "FieldChanges",
    "Insert",
    "NoOp",
    "PhoneType",
    "RawContactTuple",
    "ReconciliationAction",
    "SourceError",
    "StoreError",
    "SyncConfig",
    "SyncError",
    "SyncOutcome",
    "SyncResult",
    "SyncSuccess",
    "Update",
    "build_contact_record",
    "build_contact_records",
    "classify",
    "compare_records",
    "dial_format",
    "dial_region",
    "format_for_dialing",
    "is_messaging_label",
    "load_config",
    "normalize",
    "reconcile",
]


def load_config(args: Any) -> SyncConfig:
    return load_sync_config(args)


def build_contact_record(raw: RawContactTuple) -> ContactRecord:
    label, _ = classify(raw.phone_type, raw.custom_label)
    return ContactRecord(
        contact_id=0,
        name=raw.name or UNKNOWN_NAME,
        phone_number=raw.number or "",
        phone_label=label,
        photo_uri=raw.photo_uri,
    )


def build_contact_records(
    raws: Iterable[RawContactTuple],
    min_phone_length: int = DEFAULT_MIN_PHONE_LENGTH,
    skip_empty_numbers: bool = True,
    log: Optional[logging.Logger] = None,
) -> List[ContactRecord]:
    log = log or logger
    records: List[ContactRecord] = []
    for raw in raws:
        record = build_contact_record(raw)
        if not record.normalized_key:
            if skip_empty_numbers:
                log.warning("Skipping %s: no digits in phone number %r", record.name, raw.number)
                continue
            log.warning("Keeping %s with empty phone number %r", record.name, raw.number)
        elif is_unclear_number(record.phone_number, min_phone_length):
            log.warning(
                "Phone number for %s looks incomplete: %r", record.name, record.phone_number
            )
        log.debug(
            "Added starred contact: %s - %s (%s)",
            record.name,
            record.phone_number,
            record.phone_label,
        )
        records.append(record)
    return records

