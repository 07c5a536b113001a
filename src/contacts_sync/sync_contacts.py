from __future__ import annotations

import argparse
import csv
import logging
import threading
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from .common import build_contact_records, load_config
from .config_loader import WRITE_ERROR_POLICIES, SyncConfig
from .errors import ContactSyncError
from .logging_utils import configure_logging
from .merge import reconcile
from .models import (
    Insert,
    ReconciliationAction,
    SyncError,
    SyncOutcome,
    SyncResult,
    SyncSuccess,
    Update,
)
from .normalization import DEFAULT_MIN_PHONE_LENGTH, dial_format, dial_region
from .store import ContactSource, ContactStore, CsvContactSource, CsvContactStore

logger = logging.getLogger(__name__)

# reconcile assumes a consistent store snapshot, so runs in one process are serialized
_SYNC_LOCK = threading.Lock()

REPORT_COLUMNS = [
    "name",
    "phone_number",
    "normalized_key",
    "dialable",
    "dial_rule",
    "region",
    "phone_label",
    "is_messaging_contact",
    "action",
    "contact_id",
]


def apply_actions(
    store: ContactStore,
    actions: Sequence[ReconciliationAction],
    on_write_error: str = "abort",
    log: Optional[logging.Logger] = None,
) -> SyncOutcome:
    """
    Write ``actions`` to ``store`` and count what actually landed.

    With ``on_write_error="abort"`` the first failed write propagates and the
    remaining actions are not attempted. With ``"continue"`` each failure is
    logged, counted in ``failed`` and the run carries on.
    """
    log = log or logger
    inserted = updated = failed = 0
    for action in actions:
        if not isinstance(action, (Insert, Update)):
            continue
        try:
            if isinstance(action, Insert):
                contact_id = store.insert(action.record)
                inserted += 1
                log.debug("New contact inserted with ID: %s", contact_id)
            else:
                store.update(action)
                updated += 1
                log.debug("Contact updated with ID: %s", action.contact_id)
        except ContactSyncError as exc:
            if on_write_error != "continue":
                raise
            failed += 1
            log.warning("Failed to %s %s: %s", action.kind, action.record.name, exc)
    return SyncOutcome(inserted=inserted, updated=updated, failed=failed)


def sync_starred_contacts(
    source: ContactSource,
    store: ContactStore,
    min_phone_length: int = DEFAULT_MIN_PHONE_LENGTH,
    on_write_error: str = "abort",
    skip_empty_numbers: bool = True,
    log: Optional[logging.Logger] = None,
) -> SyncResult:
    log = log or logger
    with _SYNC_LOCK:
        try:
            raws = source.fetch_starred()
            records = build_contact_records(
                raws,
                min_phone_length=min_phone_length,
                skip_empty_numbers=skip_empty_numbers,
                log=log,
            )
            existing = store.list_all()
            actions, planned = reconcile(records, existing, log=log)
            outcome = apply_actions(store, actions, on_write_error=on_write_error, log=log)
        except ContactSyncError as exc:
            log.error("Error during contact sync: %s", exc)
            return SyncError(message=f"Error during contact sync: {exc}", exception=exc)

    if outcome.failed:
        log.warning(
            "Sync planned %s but %d write(s) failed", planned.summary(), outcome.failed
        )
    log.info(
        "Sync completed: %d new, %d updated, %d total starred contacts processed",
        outcome.inserted,
        outcome.updated,
        len(records),
    )
    return SyncSuccess(outcome=outcome, actions=actions)


def build_report(
    actions: Sequence[ReconciliationAction], min_phone_length: int = DEFAULT_MIN_PHONE_LENGTH
) -> pd.DataFrame:
    rows = []
    for action in actions:
        record = action.record
        formatted = dial_format(record.phone_number, min_length=min_phone_length)
        rows.append(
            {
                "name": record.name,
                "phone_number": record.phone_number,
                "normalized_key": record.normalized_key,
                "dialable": formatted.digits,
                "dial_rule": formatted.rule,
                "region": dial_region(formatted.digits) if not formatted.unclear else "",
                "phone_label": record.phone_label,
                "is_messaging_contact": record.is_messaging_contact,
                "action": action.kind,
                "contact_id": "" if isinstance(action, Insert) else action.contact_id,
            }
        )
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def write_sync_report(
    actions: Sequence[ReconciliationAction], out_dir: Path, min_phone_length: int
) -> Path:
    report_path = Path(out_dir) / "sync_report.csv"
    df = build_report(actions, min_phone_length=min_phone_length)
    df.to_csv(str(report_path), index=False, encoding="utf-8", quoting=csv.QUOTE_ALL)
    return report_path


def build(args: argparse.Namespace, config: Optional[SyncConfig] = None) -> SyncResult:
    config = config or load_config(args)
    config.outputs.dir.mkdir(parents=True, exist_ok=True)
    store_path = config.inputs.store_csv or str(config.outputs.dir / "contacts_store.csv")
    try:
        store = CsvContactStore(store_path)
    except ContactSyncError as exc:
        logger.error("Error during contact sync: %s", exc)
        return SyncError(message=f"Error during contact sync: {exc}", exception=exc)

    result = sync_starred_contacts(
        CsvContactSource(config.inputs.contacts_csv),
        store,
        min_phone_length=config.normalization.min_phone_length,
        on_write_error=config.sync.on_write_error,
        skip_empty_numbers=config.sync.skip_empty_numbers,
    )
    if isinstance(result, SyncSuccess):
        report_path = write_sync_report(
            result.actions, config.outputs.dir, config.normalization.min_phone_length
        )
        logger.info("Saved: %s", report_path)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Sync starred contacts from a provider export into the local store."
    )
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config.")
    parser.add_argument("--contacts-csv", type=str, default=None)
    parser.add_argument("--store-csv", type=str, default=None)
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--on-write-error", choices=WRITE_ERROR_POLICIES, default=None)
    parser.add_argument("--min-phone-length", type=int, default=None)
    parser.add_argument("--log-level", type=str, default=None, help="Override logging level")
    args = parser.parse_args(argv)

    config = load_config(args)
    configure_logging(config, level_override=args.log_level)
    result = build(args, config=config)

    if isinstance(result, SyncError):
        print(result.message)
        return 1
    print(result.outcome.summary())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
