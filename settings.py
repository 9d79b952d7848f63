from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_LISTEN_ADDR_ENV = "TASMOTA_EXPORTER_LISTEN_ADDR"
_FETCH_TIMEOUT_ENV = "TASMOTA_EXPORTER_FETCH_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_LISTEN_ADDR = ":9090"
DEFAULT_FETCH_TIMEOUT = 5.0
_ANY_HOST = "0.0.0.0"


@dataclass(frozen=True)
class Settings:
    listen_addr: str
    fetch_timeout: float
    log_level: str

    @property
    def listen_host(self) -> str:
        return parse_listen_address(self.listen_addr)[0]

    @property
    def listen_port(self) -> int:
        return parse_listen_address(self.listen_addr)[1]


def parse_listen_address(value: str) -> Tuple[str, int]:
    """Split ``[host]:port`` into a bindable host and port."""
    candidate = value.strip()
    if ":" in candidate:
        host, port_raw = candidate.rsplit(":", 1)
    else:
        host, port_raw = "", candidate
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ValueError(f"Invalid listen address {value!r}.") from exc
    if not 0 < port < 65536:
        raise ValueError(f"Invalid listen port in {value!r}.")
    return host.strip("[]") or _ANY_HOST, port


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_listen_addr(default: str) -> str:
    candidate = _read_str_env(_LISTEN_ADDR_ENV, default)
    try:
        parse_listen_address(candidate)
    except ValueError:
        return default
    return candidate


def _read_fetch_timeout(default: float) -> float:
    value = os.getenv(_FETCH_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        listen_addr=_read_listen_addr(DEFAULT_LISTEN_ADDR),
        fetch_timeout=_read_fetch_timeout(DEFAULT_FETCH_TIMEOUT),
        log_level=_read_log_level("INFO"),
    )
