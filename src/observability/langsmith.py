"""LangSmith tracing for dispatch batches.

Disabled unless LANGSMITH_TRACING=true; then batch runners decorated with
``traceable`` are recorded under LANGSMITH_PROJECT (default "discover-search").
"""

from __future__ import annotations

import atexit
import os
from collections.abc import Callable
from typing import Any

_ENABLED = os.getenv("LANGSMITH_TRACING", "").strip().lower() == "true"


def tracing_enabled() -> bool:
    return _ENABLED


def _noop_traceable(
    name: str | None = None,
    run_type: str = "chain",
    **kwargs: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    del name, run_type, kwargs

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        return fn

    return decorator


def _noop_flush() -> None:
    pass


traceable = _noop_traceable
flush = _noop_flush

if _ENABLED:
    from langsmith import Client
    from langsmith import traceable as _ls_traceable

    _project = os.getenv("LANGSMITH_PROJECT", "discover-search")
    _client: Client | None = None

    def _get_client() -> Client:
        global _client
        if _client is None:
            _client = Client()
        return _client

    def traceable(
        name: str | None = None,
        run_type: str = "chain",
        **kwargs: Any,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        kwargs.setdefault("project_name", _project)
        return _ls_traceable(  # type: ignore[call-overload]
            name=name,
            run_type=run_type,
            client=_get_client(),
            **kwargs,
        )

    def flush() -> None:
        _get_client().flush()

    atexit.register(flush)
