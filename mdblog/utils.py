from __future__ import annotations

DEFAULT_LISTEN_ADDRESS = "127.0.0.1:8080"


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_listen_address(value: str) -> tuple[str, int]:
    value = value.strip() or DEFAULT_LISTEN_ADDRESS
    host, sep, port = value.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must look like HOST:PORT, got {value!r}")
    host = host.strip("[]") or "0.0.0.0"
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {value!r}") from None
    if not 0 < port_number < 65536:
        raise ValueError(f"Port out of range in listen address {value!r}")
    return host, port_number
