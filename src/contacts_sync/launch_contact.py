from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .common import build_contact_record, load_config
from .labels import PhoneType
from .launch import launch_targets
from .logging_utils import configure_logging
from .models import RawContactTuple

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Print the chat and call URIs used to launch a contact."
    )
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--number", type=str, required=True)
    parser.add_argument("--name", type=str, default=None)
    parser.add_argument("--type", dest="phone_type", type=int, default=int(PhoneType.MOBILE))
    parser.add_argument("--label", type=str, default=None, help="Custom label text")
    parser.add_argument("--min-phone-length", type=int, default=None)
    parser.add_argument("--log-level", type=str, default=None, help="Override logging level")
    args = parser.parse_args(argv)

    config = load_config(args)
    configure_logging(config, level_override=args.log_level)

    record = build_contact_record(
        RawContactTuple(
            name=args.name,
            number=args.number,
            phone_type=args.phone_type,
            custom_label=args.label,
        )
    )
    logger.info("Launching %s (%s)", record.name, record.phone_label)
    for target in launch_targets(record, min_length=config.normalization.min_phone_length):
        print(target)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
