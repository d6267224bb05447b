from __future__ import annotations

from typing import Optional

from flask import request

from wineo.app.common.errors import abort_json


def int_arg(name: str, default: int, minimum: int = 0, maximum: Optional[int] = None) -> int:
    """Integer query parameter, clamped to [minimum, maximum]."""
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        abort_json(400, "validation_error", f"{name} must be an integer", {"param": name, "value": raw})
    value = max(minimum, value)
    if maximum is not None:
        value = min(value, maximum)
    return value


def number_arg(name: str) -> Optional[float]:
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        abort_json(400, "validation_error", f"{name} must be a number", {"param": name, "value": raw})


def flag_arg(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in ("1", "true", "yes")
