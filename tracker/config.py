from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "PROD_TRACKER_DATA_DIR"
ENV_ADMIN_PASSWORD = "PROD_TRACKER_ADMIN_PASSWORD"
SESSION_DATA_DIR_KEY = "prod_tracker_data_dir"

DEFAULT_ADMIN_PASSWORD = "admin123"
MAX_PIECES_PER_BATCH = 10_000


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    log_dir: Path
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    max_pieces_per_batch: int = MAX_PIECES_PER_BATCH
    app_title: str = "Factory Production Tracker"


def _default_data_dir() -> Path:
    return Path.home() / ".prod_tracker"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
    return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = data_dir / CONFIG_FILE_NAME
    payload: dict[str, Any] = _load_persisted_settings(data_dir)
    payload["data_dir"] = str(data_dir)
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state[SESSION_DATA_DIR_KEY] = str(data_dir)


def load_settings(
    session: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    default_dir: Optional[Path] = None,
) -> Settings:
    # Priority order for the data directory:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    session = session if session is not None else {}
    environ = environ if environ is not None else os.environ
    default_dir = default_dir or _default_data_dir()

    persisted = _load_persisted_settings(default_dir)
    if session.get(SESSION_DATA_DIR_KEY):
        data_dir = Path(session[SESSION_DATA_DIR_KEY]).expanduser().resolve()
    elif environ.get(ENV_DATA_DIR):
        data_dir = Path(environ[ENV_DATA_DIR]).expanduser().resolve()
    else:
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    if data_dir != default_dir.expanduser().resolve():
        persisted = {**persisted, **_load_persisted_settings(data_dir)}

    admin_password = environ.get(ENV_ADMIN_PASSWORD) or persisted.get("admin_password") or DEFAULT_ADMIN_PASSWORD

    data_dir.mkdir(parents=True, exist_ok=True)
    return Settings(
        data_dir=data_dir,
        db_path=data_dir / "production.db",
        log_dir=data_dir / "logs",
        admin_password=str(admin_password),
    )


@st.cache_resource
def get_settings() -> Settings:
    session: MutableMapping[str, Any] = st.session_state
    return load_settings(session=session)
