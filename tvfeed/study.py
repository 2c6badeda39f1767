"""Study input values as sent to the server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["InputValue", "indicator_input_to_json"]


@dataclass(frozen=True)
class InputValue:
    """A typed study input: value, flag and type."""

    v: Any
    f: Any
    t: Any

    def to_json(self) -> dict[str, Any]:
        return {"v": self.v, "f": self.f, "t": self.t}


def indicator_input_to_json(value: str | InputValue) -> Any:
    """Serialise an input that is either a plain string or an ``InputValue``."""
    if isinstance(value, str):
        return value
    if isinstance(value, InputValue):
        return value.to_json()
    raise TypeError(f"unsupported indicator input: {type(value).__name__}")