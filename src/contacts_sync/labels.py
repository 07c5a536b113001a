from __future__ import annotations

from enum import IntEnum
from typing import Dict, Optional, Tuple

MESSAGING_TOKENS = ("whatsapp", "wa")


class PhoneType(IntEnum):
    CUSTOM = 0
    HOME = 1
    MOBILE = 2
    WORK = 3
    FAX_WORK = 4
    FAX_HOME = 5
    PAGER = 6
    OTHER = 7
    MAIN = 12
    WORK_MOBILE = 17
    WORK_PAGER = 18
    ASSISTANT = 19
    MMS = 20


TYPE_LABELS: Dict[int, str] = {
    PhoneType.HOME: "Home",
    PhoneType.MOBILE: "Mobile",
    PhoneType.WORK: "Work",
    PhoneType.FAX_WORK: "Work Fax",
    PhoneType.FAX_HOME: "Home Fax",
    PhoneType.PAGER: "Pager",
    PhoneType.OTHER: "Other",
    PhoneType.MAIN: "Main",
    PhoneType.WORK_MOBILE: "Work Mobile",
    PhoneType.WORK_PAGER: "Work Pager",
    PhoneType.ASSISTANT: "Assistant",
    PhoneType.MMS: "MMS",
}

GENERIC_LABEL = "Phone"


def is_messaging_label(label: Optional[str]) -> bool:
    if label is None:
        return False
    lowered = label.lower()
    return any(token in lowered for token in MESSAGING_TOKENS)


def phone_type_label(type_code: int, custom_label: Optional[str] = None) -> str:
    if type_code == PhoneType.CUSTOM:
        lowered = custom_label.lower() if custom_label is not None else "custom"
        if any(token in lowered for token in MESSAGING_TOKENS):
            return custom_label if custom_label is not None else "WhatsApp"
        return custom_label if custom_label is not None else "Custom"
    return TYPE_LABELS.get(type_code, GENERIC_LABEL)


def classify(type_code: int, custom_label: Optional[str] = None) -> Tuple[str, bool]:
    """
    Map a provider phone type code and optional custom label to
    ``(display_label, is_messaging_contact)``.

    The messaging flag is a plain substring test for "whatsapp" or "wa", so
    custom labels such as "Hawaii" also carry it.
    """
    label = phone_type_label(type_code, custom_label)
    return label, is_messaging_label(label)


def coerce_type_code(value: object) -> int:
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return -1
