from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Dict, List, Optional, Union

from .labels import is_messaging_label
from .normalization import normalize

UNKNOWN_NAME = "Unknown"


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class RawContactTuple:
    name: Optional[str]
    number: Optional[str]
    photo_uri: Optional[str] = None
    phone_type: int = 0
    custom_label: Optional[str] = None


@dataclass(frozen=True)
class ContactRecord:
    contact_id: int = 0
    name: str = UNKNOWN_NAME
    phone_number: str = ""
    phone_label: str = ""
    photo_uri: Optional[str] = None

    @property
    def normalized_key(self) -> str:
        return normalize(self.phone_number)

    @property
    def is_messaging_contact(self) -> bool:
        return is_messaging_label(self.phone_label)

    @property
    def is_persisted(self) -> bool:
        return self.contact_id != 0

    @classmethod
    def from_mapping(cls, payload: Dict[str, Any]) -> "ContactRecord":
        raw_id = payload.get("contact_id", 0)
        try:
            contact_id = int(raw_id or 0)
        except (TypeError, ValueError):
            contact_id = 0
        return cls(
            contact_id=contact_id,
            name=str(payload.get("name", "") or "").strip() or UNKNOWN_NAME,
            phone_number=str(payload.get("phone_number", "") or "").strip(),
            phone_label=str(payload.get("phone_label", "") or "").strip(),
            photo_uri=_optional_text(payload.get("photo_uri")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contact_id": self.contact_id,
            "name": self.name,
            "phone_number": self.phone_number,
            "phone_label": self.phone_label,
            "photo_uri": self.photo_uri or "",
        }

    def replace(self, **changes: Any) -> "ContactRecord":
        return replace(self, **changes)


@dataclass(frozen=True)
class Insert:
    kind: ClassVar[str] = "insert"
    record: ContactRecord


@dataclass(frozen=True)
class Update:
    kind: ClassVar[str] = "update"
    contact_id: int
    name: str
    phone_label: str
    photo_uri: Optional[str]
    record: ContactRecord

    def apply_to(self, existing: ContactRecord) -> ContactRecord:
        return existing.replace(
            name=self.name, phone_label=self.phone_label, photo_uri=self.photo_uri
        )


@dataclass(frozen=True)
class NoOp:
    kind: ClassVar[str] = "noop"
    record: ContactRecord
    contact_id: int = 0


ReconciliationAction = Union[Insert, Update, NoOp]


@dataclass(frozen=True)
class SyncOutcome:
    inserted: int = 0
    updated: int = 0
    failed: int = 0

    @property
    def has_changes(self) -> bool:
        return self.inserted > 0 or self.updated > 0

    def summary(self) -> str:
        if self.has_changes:
            text = f"{self.inserted} new, {self.updated} updated"
        else:
            text = "No changes needed"
        if self.failed:
            text = f"{text}, {self.failed} failed"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "failed": self.failed,
            "has_changes": self.has_changes,
        }


@dataclass(frozen=True)
class SyncSuccess:
    outcome: SyncOutcome
    actions: List[ReconciliationAction] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class SyncError:
    message: str
    exception: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return False


SyncResult = Union[SyncSuccess, SyncError]
