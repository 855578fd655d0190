"""Structured JSON logging to stdout.

One JSON object per line, stamped with the current request id. Fields whose
name looks like a credential are masked before printing.
"""

from typing import Any, Dict
from datetime import datetime, timezone
import json

from flight_finder.obs.context import request_id_var, operation_var

_SECRET_MARKERS = ("key", "token", "secret", "password")


def _is_secret(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def _mask(value: Any) -> str:
    s = str(value) if value is not None else ""
    if len(s) <= 4:
        return "***"
    return f"***{s[-4:]}"


def log_event(event: str, **fields: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    payload: Dict[str, Any] = {
        "ts": now,
        "level": fields.pop("level", "INFO"),
        "event": event,
        "request_id": request_id_var.get(),
    }
    operation = operation_var.get()
    if operation and "operation" not in fields:
        payload["operation"] = operation

    for k, v in fields.items():
        payload[k] = _mask(v) if _is_secret(k) else v

    print(json.dumps(payload, separators=(",", ":"), default=str))
