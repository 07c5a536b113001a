from __future__ import annotations

import logging
from typing import List, Optional

from .models import ContactRecord
from .normalization import DEFAULT_MIN_PHONE_LENGTH, format_for_dialing

logger = logging.getLogger(__name__)

WEB_CHAT_URL = "https://wa.me/{number}"
APP_CHAT_URL = "whatsapp://send?phone={number}"
CALL_URI = "tel:{number}"


def messaging_links(
    phone_number: str,
    min_length: int = DEFAULT_MIN_PHONE_LENGTH,
    log: Optional[logging.Logger] = None,
) -> List[str]:
    dialable = format_for_dialing(phone_number, min_length=min_length, log=log)
    if not dialable:
        return []
    return [WEB_CHAT_URL.format(number=dialable), APP_CHAT_URL.format(number=dialable)]


def call_uri(phone_number: str) -> str:
    return CALL_URI.format(number=(phone_number or "").strip())


def launch_targets(
    record: ContactRecord,
    min_length: int = DEFAULT_MIN_PHONE_LENGTH,
    log: Optional[logging.Logger] = None,
) -> List[str]:
    """
    Ordered URIs to try when the contact is tapped.

    Messaging contacts get the chat deep links first; every contact ends with
    a plain call so the caller always has something to fall back on.
    """
    log = log or logger
    targets: List[str] = []
    if record.is_messaging_contact:
        targets.extend(messaging_links(record.phone_number, min_length=min_length, log=log))
        if not targets:
            log.warning("No chat link for %s, falling back to a call", record.name)
    targets.append(call_uri(record.phone_number))
    return targets
