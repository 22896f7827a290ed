import json
import re
from typing import Optional, Union

from .logutil import get_logger

Number = Union[int, float]

# Lightweight extraction: bare number, JSON object, or key=value with an optional unit
_NUMBER = r"[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?"
_BARE = re.compile(rf"^\s*({_NUMBER})\s*$")


def _to_number(text: str) -> Number:
    try:
        return int(text)
    except ValueError:
        return float(text)


def parse_value(line: str, field: Optional[str] = None) -> Optional[Number]:
    """
    Returns the numeric observation carried by a line, or None.

    Without ``field`` the line must be a bare number. With ``field`` the value
    is read from a JSON object key or from a ``field=123`` / ``field=12.5ms``
    pair. Integers stay ints so integer streams estimate exactly.
    """
    line = line.strip()
    if not line:
        return None
    if field is None:
        match = _BARE.match(line)
        return _to_number(match.group(1)) if match else None

    if line.startswith("{") and line.endswith("}"):
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as exc:
            get_logger().warning("JSON parse failed: %s", exc)
            return None
        raw = obj.get(field) if isinstance(obj, dict) else None
        if isinstance(raw, bool):
            return None
        if isinstance(raw, (int, float)):
            return raw
        if isinstance(raw, str):
            match = _BARE.match(raw)
            return _to_number(match.group(1)) if match else None
        return None

    match = re.search(rf"(?:^|[\s,;]){re.escape(field)}[=:]\s*({_NUMBER})", line)
    return _to_number(match.group(1)) if match else None


__all__ = ["parse_value"]
