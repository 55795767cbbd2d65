"""Structured logging: console plus a JSONL event log of search batches."""

import contextvars
import json
import logging
import os
import sys
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from src.core.config import config


def _format_duration(seconds: float) -> str:
    if seconds < 0:
        return "0s"
    if seconds >= 60:
        m = int(seconds // 60)
        s = seconds % 60
        if s < 0.05:
            return f"{m}m"
        return f"{m}m {s:.0f}s" if s >= 1 else f"{m}m {s:.1f}s"
    if seconds >= 0.05:
        return f"{seconds:.1f}s"
    if seconds > 0:
        return "<0.1s"
    return "0s"


def _short_reason(reason: str | None, max_len: int = 80) -> str:
    """One-line short reason for console (failed source)."""
    if not reason or not reason.strip():
        return ""
    s = reason.strip().replace("\n", " ").strip()
    return s[:max_len] + "..." if len(s) > max_len else s


_log_generation: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "log_generation", default=None
)


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    # 38;5;N = foreground 256-color
    codes = {
        "dim": "\033[38;5;239m",
        "source": "\033[38;5;81m",  # cyan for category names
        "run": "\033[38;5;78m",
        "done_ok": "\033[38;5;78m",
        "done_fail": "\033[38;5;203m",
        "duration": "\033[38;5;221m",
        "stale": "\033[38;5;245m",
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, ensure_ascii=False)


class DiscoverLogger:
    def __init__(self):
        config.logs_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = config.logs_dir / "discover.log"
        self._file_lock = threading.Lock()
        self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("discover")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.INFO)
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)

    def log_event(self, event: LogEvent) -> None:
        with self._file_lock:
            self._log_file_handle.write(event.to_json() + "\n")
            self._log_file_handle.flush()

    def _timestamp(self) -> str:
        return datetime.now().isoformat()

    def _prefix(self) -> str:
        generation = _log_generation.get()
        if generation is None:
            return ""
        return f"{_c('dim')}#{generation}{_reset()} "

    def set_generation(self, generation: int | None) -> None:
        _log_generation.set(generation)

    def search_dispatch(
        self,
        generation: int,
        text: str,
        category: str,
        page: int,
        sources: list[str],
        limit: int,
    ) -> None:
        event = LogEvent(
            event_type="SEARCH_DISPATCH",
            timestamp=self._timestamp(),
            data={
                "generation": generation,
                "text": text[:200],
                "category": category,
                "page": page,
                "sources": sources,
                "limit": limit,
            },
        )
        self.log_event(event)
        self.console.info(
            f"{self._prefix()}{_c('run')}▶ Search{_reset()}  {text[:60]!r}  "
            f"tab={_c('source')}{category}{_reset()} page={page} limit={limit}"
        )

    def source_result(
        self,
        generation: int,
        source: str,
        item_count: int,
        total: int,
        elapsed_ms: float,
        *,
        failed: bool = False,
        error_kind: str | None = None,
        error: str | None = None,
    ) -> None:
        data: dict[str, Any] = {
            "generation": generation,
            "source": source,
            "items": item_count,
            "total": total,
            "elapsed_ms": elapsed_ms,
            "failed": failed,
        }
        if failed:
            data["error_kind"] = error_kind
            if error:
                data["error"] = error[:500]
        self.log_event(
            LogEvent(event_type="SOURCE_RESULT", timestamp=self._timestamp(), data=data)
        )
        dur = f"{_c('duration')}{_format_duration(elapsed_ms / 1000)}{_reset()}"
        if failed:
            reason = _short_reason(error) or error_kind or ""
            status = f"{_c('done_fail')}[failed: {error_kind}]{_reset()}"
            self.console.info(
                f"{self._prefix()}  {_c('source')}{source}{_reset()}  {dur}  {status}  {reason}"
            )
        else:
            self.console.info(
                f"{self._prefix()}  {_c('source')}{source}{_reset()}  {dur}  "
                f"{item_count}/{total}  {_c('done_ok')}[ok]{_reset()}"
            )

    def batch_published(
        self, generation: int, totals: dict[str, int], partial: bool
    ) -> None:
        event = LogEvent(
            event_type="BATCH_PUBLISHED",
            timestamp=self._timestamp(),
            data={"generation": generation, "totals": totals, "partial": partial},
        )
        self.log_event(event)
        summary = ", ".join(f"{k}={v}" for k, v in totals.items())
        partial_note = f"  {_c('done_fail')}(partial){_reset()}" if partial else ""
        self.console.info(
            f"{self._prefix()}{_c('done_ok')}✓ Published{_reset()}  {summary}{partial_note}"
        )

    def batch_discarded(self, generation: int, current: int) -> None:
        event = LogEvent(
            event_type="BATCH_DISCARDED",
            timestamp=self._timestamp(),
            data={"generation": generation, "current": current},
        )
        self.log_event(event)
        self.console.debug(
            f"{self._prefix()}{_c('stale')}Discarded stale batch (current #{current}){_reset()}"
        )

    def empty_query(self, generation: int) -> None:
        event = LogEvent(
            event_type="EMPTY_QUERY",
            timestamp=self._timestamp(),
            data={"generation": generation},
        )
        self.log_event(event)
        self.console.debug(f"{self._prefix()}Empty query: cleared results")

    def _message_event(
        self, event_type: str, message: str, args: tuple, exception: BaseException | None = None
    ) -> str:
        text = message % args if args else message
        data: dict[str, Any] = {"message": text[:500], "generation": _log_generation.get()}
        if exception is not None:
            data["exception"] = f"{type(exception).__name__}: {exception}"
        self.log_event(LogEvent(event_type=event_type, timestamp=self._timestamp(), data=data))
        return text

    def error(self, message: str, *args, exception: BaseException | None = None) -> None:
        text = self._message_event("ERROR", message, args, exception)
        self.console.error(
            f"{self._prefix()}{_c('done_fail')}❌ {text}{_reset()}", exc_info=exception
        )

    def warning(self, message: str, *args) -> None:
        text = self._message_event("WARNING", message, args)
        self.console.warning(f"{self._prefix()}⚠️ {text}")

    def debug(self, message: str, *args) -> None:
        text = self._message_event("DEBUG", message, args)
        self.console.debug(f"{self._prefix()}{_c('dim')}{text}{_reset()}")

logger = DiscoverLogger()
