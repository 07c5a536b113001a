from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import phonenumbers

logger = logging.getLogger(__name__)

DEFAULT_MIN_PHONE_LENGTH = 7

NON_DIGIT_RE = re.compile(r"\D")
NON_DIAL_RE = re.compile(r"[^+\d]")

# prefix, exact length (None = any), minimum length
COUNTRY_CODE_RULES = (
    ("1", 11, 11),  # US/Canada
    ("91", 12, 12),  # India
    ("44", None, 11),  # UK
    ("49", None, 11),  # Germany
    ("33", None, 10),  # France
    ("39", None, 10),  # Italy
    ("81", None, 10),  # Japan
    ("86", None, 11),  # China
)


def digits_only(raw: Optional[str]) -> str:
    return NON_DIGIT_RE.sub("", raw or "")


def normalize(raw: Optional[str]) -> str:
    """
    Reduce a phone number to the digit key used to match subscribers.

    An 11-digit number with a leading ``1`` is treated as a US/Canada number
    carrying its country code and collapsed to the 10-digit national form.
    National numbers elsewhere that happen to share that shape are collapsed
    as well; callers rely on that behavior staying stable.
    """
    digits = digits_only(raw)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    logger.debug("Normalized %r -> %r", raw, digits)
    return digits


@dataclass(frozen=True)
class DialFormat:
    digits: str
    rule: str
    had_plus: bool = False
    unclear: bool = False


def _match_country_code(digits: str) -> Optional[str]:
    for prefix, exact, minimum in COUNTRY_CODE_RULES:
        if not digits.startswith(prefix):
            continue
        if exact is not None and len(digits) != exact:
            continue
        if len(digits) >= minimum:
            return prefix
    return None


def dial_format(
    raw: Optional[str],
    min_length: int = DEFAULT_MIN_PHONE_LENGTH,
    log: Optional[logging.Logger] = None,
) -> DialFormat:
    """
    Work out the international digit string used for a messaging deep link.

    The country code is guessed from the number's shape. A bare 10-digit
    number starting with 2-9 is always read as US/Canada, so the India rule
    for 6-9 never fires; that ordering is kept as is.
    """
    log = log or logger
    clean = NON_DIAL_RE.sub("", raw or "")
    had_plus = clean.startswith("+")
    if had_plus:
        clean = clean[1:]
    digits = digits_only(clean)
    log.debug("Formatting %r -> %r (had +: %s)", raw, digits, had_plus)

    if len(digits) < min_length:
        log.warning("Number too short: %r", digits)
        return DialFormat(digits=digits, rule="too_short", had_plus=had_plus, unclear=True)

    if had_plus or len(digits) > 11:
        return DialFormat(digits=digits, rule="international", had_plus=had_plus)

    country_code = _match_country_code(digits)
    if country_code is not None:
        return DialFormat(digits=digits, rule=f"country_code_{country_code}", had_plus=had_plus)

    if len(digits) == 10 and digits[0] in "23456789":
        return DialFormat(digits="1" + digits, rule="default_us", had_plus=had_plus)
    if len(digits) == 10 and digits[0] in "6789":
        return DialFormat(digits="91" + digits, rule="default_india", had_plus=had_plus)
    if digits.startswith("0") and len(digits) >= 10:
        return DialFormat(digits="44" + digits[1:], rule="uk_trunk_prefix", had_plus=had_plus)
    if len(digits) >= 10:
        return DialFormat(digits=digits, rule="assumed_international", had_plus=had_plus)

    log.warning("Unclear format for number: %r", digits)
    return DialFormat(digits=digits, rule="unclear", had_plus=had_plus, unclear=True)


def format_for_dialing(
    raw: Optional[str],
    min_length: int = DEFAULT_MIN_PHONE_LENGTH,
    log: Optional[logging.Logger] = None,
) -> str:
    return dial_format(raw, min_length=min_length, log=log).digits


def dial_region(dialable: str) -> str:
    """Return the ISO region code the dialable digits resolve to, or ""."""
    if not dialable:
        return ""
    try:
        parsed = phonenumbers.parse(f"+{dialable}", None)
    except phonenumbers.NumberParseException:
        logger.debug("phonenumbers.parse failed for %s", dialable)
        return ""
    region = phonenumbers.region_code_for_number(parsed)
    if not region or region == phonenumbers.UNKNOWN_REGION:
        region = phonenumbers.region_code_for_country_code(parsed.country_code)
    if not region or region == phonenumbers.UNKNOWN_REGION:
        return ""
    return region


def is_unclear_number(raw: Optional[str], min_length: int = DEFAULT_MIN_PHONE_LENGTH) -> bool:
    return len(digits_only(raw)) < min_length
