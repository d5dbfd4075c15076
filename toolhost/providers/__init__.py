"""Capability provider loading.

Providers are named by ``module:attribute`` import paths so hosts can plug in their
own tool sets without the server importing them eagerly.
"""
from __future__ import annotations

from importlib import import_module
from typing import Iterable, List

from ..registry.registry import ToolProvider


def load_provider(spec: str) -> ToolProvider:
    """Instantiate a provider from a ``module:attribute`` path.

    The attribute may be a class or any zero-argument factory.
    """

    module_name, sep, attr = spec.strip().partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(
            f"Invalid provider spec '{spec}'. Expected 'package.module:Attribute'."
        )
    module = import_module(module_name)
    try:
        factory = getattr(module, attr)
    except AttributeError as exc:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr}'") from exc
    provider = factory()
    if not callable(getattr(provider, "manifest", None)):
        raise TypeError(f"Provider '{spec}' does not declare a tool manifest")
    return provider


def load_providers(specs: Iterable[str]) -> List[ToolProvider]:
    return [load_provider(spec) for spec in specs]


__all__ = ["load_provider", "load_providers"]
