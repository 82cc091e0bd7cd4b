"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}.") from exc


@dataclass(frozen=True)
class ReportSettings:
    """Fixed text blocks printed on every exported report."""

    title: str = "Painel do Gestor - Prefeitura Municipal"
    subtitle: str = "Relatório de Digitalização"
    footer: str = "Copyright © 2026 | Suporte Técnico"


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Ledgerscope"
    DB_FILENAME = "ledgerscope.db"
    DEFAULT_PAGE_SIZE = 20

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("LEDGERSCOPE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("LEDGERSCOPE_DATABASE_URL", self._build_sqlite_url())
        self.EXPORT_DIR = Path(
            os.getenv("LEDGERSCOPE_EXPORT_DIR", str(self.DATA_DIR / "exports"))
        ).expanduser()
        self.PAGE_SIZE = _env_int("LEDGERSCOPE_PAGE_SIZE", self.DEFAULT_PAGE_SIZE)
        if self.PAGE_SIZE < 1:
            raise ValueError("LEDGERSCOPE_PAGE_SIZE must be a positive integer.")

        defaults = ReportSettings()
        self.REPORT_TITLE = os.getenv("LEDGERSCOPE_REPORT_TITLE", defaults.title)
        self.REPORT_SUBTITLE = os.getenv("LEDGERSCOPE_REPORT_SUBTITLE", defaults.subtitle)
        self.REPORT_FOOTER = os.getenv("LEDGERSCOPE_REPORT_FOOTER", defaults.footer)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file, logs and exports live."""

        data_root = os.getenv("LEDGERSCOPE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}

    def report_settings(self) -> ReportSettings:
        return ReportSettings(
            title=self.REPORT_TITLE,
            subtitle=self.REPORT_SUBTITLE,
            footer=self.REPORT_FOOTER,
        )


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False
