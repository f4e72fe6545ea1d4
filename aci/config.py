"""
aci.config — output, logging and server settings.

Configuration precedence:
  1) Environment variables (ACI_*)
  2) Hardcoded defaults below

Env vars:
  - ACI_LOG_LEVEL         (str)   default: WARNING
  - ACI_JSON_INDENT       (int)   default: 0 (compact output)
  - ACI_DECODE_TYPE_DEFS  (bool)  default: false
  - ACI_HOST              (str)   default: 127.0.0.1
  - ACI_PORT              (int)   default: 8080

Usage:
    from aci.config import load_config
    cfg = load_config()
    if cfg.json_indent: ...
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional


_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    return max(min_v, min(max_v, v))


def _env_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().upper()
    return raw if raw in _LEVELS else default


@dataclass(frozen=True)
class AciConfig:
    log_level: str
    json_indent: Optional[int]
    decode_type_defs: bool
    host: str
    port: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "log_level": self.log_level,
            "json_indent": self.json_indent,
            "decode_type_defs": self.decode_type_defs,
            "host": self.host,
            "port": self.port,
        }


@lru_cache(maxsize=1)
def load_config() -> AciConfig:
    """Build and cache an AciConfig from environment + defaults."""
    indent = _env_int("ACI_JSON_INDENT", 0, min_v=0, max_v=8)
    return AciConfig(
        log_level=_env_level("ACI_LOG_LEVEL", "WARNING"),
        json_indent=indent or None,
        decode_type_defs=_env_bool("ACI_DECODE_TYPE_DEFS", False),
        host=os.getenv("ACI_HOST") or "127.0.0.1",
        port=_env_int("ACI_PORT", 8080, min_v=1, max_v=65535),
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the command-line entry points."""
    logging.basicConfig(
        level=getattr(logging, level or load_config().log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["AciConfig", "load_config", "configure_logging"]
