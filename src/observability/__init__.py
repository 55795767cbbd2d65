"""Observability: optional LangSmith tracing of search batches (env-controlled)."""

from src.observability.langsmith import flush, traceable, tracing_enabled

__all__ = ["flush", "traceable", "tracing_enabled"]
