"""Result payload helpers for capability providers.

Domain failures are ordinary tool results, never protocol errors: read-style
tools answer ``{"error": ...}`` and mutating tools ``{"ok": false, "error": ...}``.
"""
from __future__ import annotations

from typing import Dict


def tool_ok(**data: object) -> Dict[str, object]:
    return {"ok": True, **data}


def tool_error(message: str) -> Dict[str, object]:
    return {"error": message}


def tool_failure(message: str, **details: object) -> Dict[str, object]:
    return {"ok": False, "error": message, **details}


__all__ = ["tool_error", "tool_failure", "tool_ok"]
