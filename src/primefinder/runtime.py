# runtime.py
"""
Context-local runtime state: the applied profile and the debug switch.

Code reads settings with CFG("SECTION.KEY", default) instead of passing
the profile around. A session-level debug choice (--debug, `debug on|off`)
outlives profile switches; without one, BEHAVIOUR.DEBUG decides.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Runtime:
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug_override: bool | None = None
    profile_debug: bool = False

    @property
    def debug(self) -> bool:
        if self.debug_override is not None:
            return self.debug_override
        return self.profile_debug

    @debug.setter
    def debug(self, on: bool) -> None:
        self.debug_override = bool(on)

    def apply(self, settings: Any) -> None:
        """Install a Settings object (config.load_settings) or a plain dict."""
        if isinstance(settings, Mapping):
            self.profile_name = "default"
            self.settings = dict(settings)
        else:
            self.profile_name = settings.name or "default"
            self.settings = dict(settings.data)
        self.profile_debug = self.get("BEHAVIOUR.DEBUG", False) is True

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookups, e.g. 'CONTROLLER.SLOW_THRESHOLD_S'."""
        if not key:
            return default
        cur: Any = self.settings
        for part in key.split("."):
            if not isinstance(cur, dict) or part not in cur:
                return default
            cur = cur[part]
        return cur


_current_runtime: ContextVar[Runtime | None] = ContextVar("primefinder_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def reset() -> Runtime:
    """Install a fresh Runtime in the current context and return it."""
    rt = Runtime()
    _current_runtime.set(rt)
    return rt


def APPLY(settings: Any) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)
