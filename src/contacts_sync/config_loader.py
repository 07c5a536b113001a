from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # type: ignore[import-untyped]

from .errors import ConfigError
from .normalization import DEFAULT_MIN_PHONE_LENGTH

WRITE_ERROR_POLICIES = ("abort", "continue")


@dataclass
class InputsConfig:
    contacts_csv: Optional[str] = None
    store_csv: Optional[str] = None


@dataclass
class OutputsConfig:
    dir: Path


@dataclass
class NormalizationConfig:
    min_phone_length: int = DEFAULT_MIN_PHONE_LENGTH


@dataclass
class SyncSettings:
    on_write_error: str = "abort"
    skip_empty_numbers: bool = True


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class SyncConfig:
    inputs: InputsConfig
    outputs: OutputsConfig
    normalization: NormalizationConfig
    sync: SyncSettings
    logging: LoggingConfig


def _load_yaml(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_sync_config(args: argparse.Namespace) -> SyncConfig:
    config_data = _load_yaml(getattr(args, "config", None))
    inputs_cfg = config_data.get("inputs", {}) or {}
    outputs_cfg = config_data.get("outputs", {}) or {}
    normalization_cfg = config_data.get("normalization", {}) or {}
    sync_cfg = config_data.get("sync", {}) or {}
    logging_cfg = config_data.get("logging", {}) or {}

    inputs = InputsConfig(
        contacts_csv=getattr(args, "contacts_csv", None) or inputs_cfg.get("contacts_csv"),
        store_csv=getattr(args, "store_csv", None) or inputs_cfg.get("store_csv"),
    )

    outputs_dir = Path(getattr(args, "out_dir", None) or outputs_cfg.get("dir") or os.getcwd())
    outputs = OutputsConfig(dir=outputs_dir)

    normalization = NormalizationConfig(
        min_phone_length=int(
            getattr(args, "min_phone_length", None)
            or normalization_cfg.get("min_phone_length", DEFAULT_MIN_PHONE_LENGTH)
        ),
    )

    policy = (
        getattr(args, "on_write_error", None) or sync_cfg.get("on_write_error") or "abort"
    ).lower()
    if policy not in WRITE_ERROR_POLICIES:
        raise ConfigError(
            f"sync.on_write_error must be one of {', '.join(WRITE_ERROR_POLICIES)}, got {policy!r}"
        )
    sync = SyncSettings(
        on_write_error=policy,
        skip_empty_numbers=bool(sync_cfg.get("skip_empty_numbers", True)),
    )

    arg_level = getattr(args, "log_level", None)
    effective_level = (arg_level or logging_cfg.get("level") or "WARNING").upper()
    logging_config = LoggingConfig(level=effective_level)

    return SyncConfig(
        inputs=inputs,
        outputs=outputs,
        normalization=normalization,
        sync=sync,
        logging=logging_config,
    )
