"""
Process-wide curve backend selection.

Exactly one backend is *active* at a time.  It is chosen either
explicitly with :func:`configure_curve` or, on first use, from the
``ERC5564_CURVE`` environment variable (default ``bn254``).  Once a
backend is active, selecting a different one raises
``CurveConfigurationError`` until :func:`reset_curve` is called.

Usage:
    from erc5564.config import configure_curve
    configure_curve("bls12_381")

Code that needs another curve side by side should hold a backend
explicitly (``get_backend(name)`` or ``StealthScheme.for_curve(name)``)
instead of flipping the global selection.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional, Union

from .backends import CurveBackend, get_backend
from .errors import CurveConfigurationError

logger = logging.getLogger(__name__)

ENV_CURVE = "ERC5564_CURVE"
DEFAULT_CURVE = "bn254"


@dataclass(frozen=True)
class CurveConfig:
    """Backend selection settings."""
    curve: str = DEFAULT_CURVE

    @classmethod
    def from_env(cls) -> CurveConfig:
        """Read ``ERC5564_CURVE``; empty or unset falls back to the default."""
        value = os.environ.get(ENV_CURVE, "").strip()
        return cls(curve=value or DEFAULT_CURVE)


_lock = threading.Lock()
_active: Optional[CurveBackend] = None


def configure_curve(name_or_config: Union[str, CurveConfig]) -> CurveBackend:
    """
    Select the active curve backend.

    Accepts a backend name or a ``CurveConfig``.  Re-selecting the
    already active backend is a no-op; selecting a different one raises
    ``CurveConfigurationError``.
    """
    global _active
    name = name_or_config.curve if isinstance(name_or_config, CurveConfig) else name_or_config
    backend = get_backend(name)
    with _lock:
        if _active is not None and _active.name != backend.name:
            raise CurveConfigurationError(
                f"curve backend {_active.name!r} is already active; "
                f"cannot also select {backend.name!r}"
            )
        if _active is None:
            logger.info("stealth curve backend set to %s", backend.name)
        _active = backend
    return backend


def active_curve() -> CurveBackend:
    """Return the active backend, configuring it from the environment if needed."""
    backend = _active
    if backend is not None:
        return backend
    return configure_curve(CurveConfig.from_env())


def reset_curve() -> None:
    """Clear the active selection so a different backend can be configured."""
    global _active
    with _lock:
        if _active is not None:
            logger.info("stealth curve backend %s released", _active.name)
        _active = None
