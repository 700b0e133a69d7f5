"""
Secret storage lookup.

Secrets are read by name from a mounted secrets directory first
(`<SECRETS_DIR>/<name>`, Docker/Kubernetes style), then from the environment
variable `<NAME>` (upper-cased).
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_SECRETS_DIR = "/run/secrets"


class SecretNotFoundError(RuntimeError):
    pass


def secrets_dir() -> Path:
    return Path(os.environ.get("SECRETS_DIR", DEFAULT_SECRETS_DIR).strip() or DEFAULT_SECRETS_DIR)


def get_secret(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise SecretNotFoundError("Secret name is empty.")

    path = secrets_dir() / name
    if path.is_file():
        value = path.read_text(encoding="utf-8").strip()
        if value:
            return value

    value = os.environ.get(name.upper(), "").strip()
    if value:
        return value

    raise SecretNotFoundError(f"Secret '{name}' is not configured.")
