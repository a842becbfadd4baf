"""Configuration models for the hook dispatcher."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(environ: Mapping[str, str], key: str) -> bool:
    return environ.get(key, "").strip().lower() in _TRUE_VALUES


class DispatcherSettings(BaseModel):
    """Behaviour switches for a Dispatcher.

    The defaults give the plain semantics: no cycle checks, `call` looks up
    the literal name it is given, and no locking.
    """

    model_config = ConfigDict(frozen=True)

    detect_cycles: bool = False
    resolve_on_call: bool = False
    thread_safe: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DispatcherSettings:
        """Build settings from HOOKS_* environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            detect_cycles=_env_flag(env, "HOOKS_DETECT_CYCLES"),
            resolve_on_call=_env_flag(env, "HOOKS_RESOLVE_ON_CALL"),
            thread_safe=_env_flag(env, "HOOKS_THREAD_SAFE"),
        )
