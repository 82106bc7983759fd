"""Utilities for loading local (gitignored) credentials."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SECRETS_FILENAME = "local_secrets.json"


def _default_secrets_path() -> Path:
    root = Path(__file__).resolve().parents[1]
    return root / DEFAULT_SECRETS_FILENAME


def load_local_secrets(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load secrets from a JSON file; return {} when unavailable."""

    candidate = path or os.getenv("LOCAL_SECRETS_FILE") or _default_secrets_path()
    secrets_path = Path(candidate).expanduser()
    if not secrets_path.exists():
        return {}
    try:
        with secrets_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def resolve_token(env_var: str, secrets_key: str, path: Optional[str | Path] = None) -> Optional[str]:
    """Return the token from `env_var`, falling back to the local secrets file."""

    token = os.getenv(env_var)
    if token:
        return token
    value = load_local_secrets(path).get(secrets_key)
    return str(value) if value else None


__all__ = ["load_local_secrets", "resolve_token", "DEFAULT_SECRETS_FILENAME"]
