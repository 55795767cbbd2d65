"""Configuration from environment variables (.env)."""

import os
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    project_root: Path
    logs_dir: Path
    api_base_url: str
    source_timeout_seconds: float
    overview_limit: int  # per-source cap when the "all" tab is active
    page_limit: int  # page size for single-category drill-down
    debounce_seconds: float

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        logs_dir = os.getenv("LOGS_DIR", "")
        return cls(
            project_root=project_root,
            logs_dir=Path(logs_dir) if logs_dir else project_root / "logs",
            api_base_url=os.getenv("API_BASE_URL", "http://localhost:5000/api"),
            source_timeout_seconds=float(os.getenv("SOURCE_TIMEOUT_SECONDS", "8.0")),
            overview_limit=int(os.getenv("DISCOVER_OVERVIEW_LIMIT", "6")),
            page_limit=int(os.getenv("DISCOVER_PAGE_LIMIT", "20")),
            debounce_seconds=int(os.getenv("DISCOVER_DEBOUNCE_MS", "300")) / 1000,
        )

    def validate(self) -> list[str]:
        errors = []
        if not self.api_base_url.startswith(("http://", "https://")):
            errors.append(f"API_BASE_URL must be an http(s) URL: {self.api_base_url!r}")
        if self.source_timeout_seconds <= 0:
            errors.append("SOURCE_TIMEOUT_SECONDS must be positive")
        if self.overview_limit < 1 or self.page_limit < 1:
            errors.append("DISCOVER_OVERVIEW_LIMIT and DISCOVER_PAGE_LIMIT must be >= 1")
        if self.debounce_seconds < 0:
            errors.append("DISCOVER_DEBOUNCE_MS must not be negative")
        return errors


config = Config.load()
