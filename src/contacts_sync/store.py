from __future__ import annotations

import csv
import logging
import os
from typing import Any, Dict, List, Optional, Protocol, Sequence

import pandas as pd

from .errors import SourceError, StoreError
from .labels import coerce_type_code
from .models import ContactRecord, RawContactTuple, Update

logger = logging.getLogger(__name__)

STORE_COLUMNS = ["contact_id", "name", "phone_number", "phone_label", "photo_uri"]
STARRED_VALUES = {"1", "true", "yes", "y"}


class ContactSource(Protocol):
    def fetch_starred(self) -> List[RawContactTuple]:
        ...


class ContactStore(Protocol):
    def list_all(self) -> List[ContactRecord]:
        ...

    def insert(self, record: ContactRecord) -> int:
        ...

    def update(self, action: Update) -> None:
        ...


def _cell(row: Any, key: str) -> Optional[str]:
    value = row.get(key, "")
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


class CsvContactSource:
    """Reads a contacts-provider export and keeps the starred entries."""

    def __init__(self, path: Optional[str]):
        self.path = path

    def fetch_starred(self) -> List[RawContactTuple]:
        if not self.path or not os.path.exists(self.path):
            raise SourceError(f"contacts export not found: {self.path}")
        try:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        except (
            pd.errors.EmptyDataError,
            pd.errors.ParserError,
            UnicodeDecodeError,
            OSError,
        ) as exc:
            raise SourceError(f"unable to read contacts export {self.path}: {exc}") from exc

        missing = [column for column in ("name", "number") if column not in df.columns]
        if missing:
            raise SourceError(f"contacts export missing column(s): {', '.join(missing)}")

        if "starred" in df.columns:
            df = df[df["starred"].str.strip().str.lower().isin(STARRED_VALUES)]
        df = df.sort_values("name", kind="stable")
        logger.debug("Found %d starred contacts in %s", len(df), self.path)

        contacts: List[RawContactTuple] = []
        for _, row in df.iterrows():
            contacts.append(
                RawContactTuple(
                    name=_cell(row, "name"),
                    number=_cell(row, "number"),
                    photo_uri=_cell(row, "photo_uri"),
                    phone_type=coerce_type_code(row.get("type", "")),
                    custom_label=_cell(row, "label"),
                )
            )
        return contacts


class InMemoryContactStore:
    def __init__(self, records: Optional[Sequence[ContactRecord]] = None):
        self._records: Dict[int, ContactRecord] = {}
        for record in records or []:
            self._records[record.contact_id] = record

    def _next_id(self) -> int:
        return max(self._records, default=0) + 1

    def list_all(self) -> List[ContactRecord]:
        return sorted(self._records.values(), key=lambda record: (record.name, record.contact_id))

    def insert(self, record: ContactRecord) -> int:
        contact_id = self._next_id()
        self._records[contact_id] = record.replace(contact_id=contact_id)
        return contact_id

    def update(self, action: Update) -> None:
        current = self._records.get(action.contact_id)
        if current is None:
            raise StoreError(f"contact {action.contact_id} does not exist")
        self._records[action.contact_id] = action.apply_to(current)


class CsvContactStore(InMemoryContactStore):
    """Contact store persisted as a CSV file, rewritten after every write."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(self._load())

    def _load(self) -> List[ContactRecord]:
        if not os.path.exists(self.path):
            return []
        try:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False, quoting=csv.QUOTE_ALL)
        except pd.errors.EmptyDataError:
            return []
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as exc:
            raise StoreError(f"unable to read contact store {self.path}: {exc}") from exc
        records = [ContactRecord.from_mapping(row.to_dict()) for _, row in df.iterrows()]
        return [record for record in records if record.is_persisted]

    def _flush(self) -> None:
        rows = [record.to_dict() for record in self.list_all()]
        df = pd.DataFrame(rows, columns=STORE_COLUMNS)
        try:
            df.to_csv(self.path, index=False, encoding="utf-8", quoting=csv.QUOTE_ALL)
        except OSError as exc:
            raise StoreError(f"unable to write contact store {self.path}: {exc}") from exc

    def insert(self, record: ContactRecord) -> int:
        contact_id = super().insert(record)
        self._flush()
        return contact_id

    def update(self, action: Update) -> None:
        super().update(action)
        self._flush()
