"""
Caller credential verification.

Handlers only depend on `CredentialVerifier.verify(headers) -> bool`. The
shared secret verifier is the default; the JWT verifier gives each caller its
own token signed with the stored secret.
"""

from __future__ import annotations

import hmac
import logging
import os
from typing import Mapping, Protocol

import jwt

from core import secrets

DEFAULT_SECRET_NAME = "make_connector"
DEFAULT_WEBHOOK_SECRET_NAME = "media_webhook"

logger = logging.getLogger(__name__)


class CredentialVerifier(Protocol):
    def verify(self, headers: Mapping[str, str]) -> bool:
        ...


def auth_scheme() -> str:
    return os.environ.get("AUTH_SCHEME", "shared_secret").strip().lower() or "shared_secret"


def secret_name() -> str:
    return os.environ.get("AUTH_SECRET_NAME", DEFAULT_SECRET_NAME).strip() or DEFAULT_SECRET_NAME


def webhook_secret_name() -> str:
    return (
        os.environ.get("WEBHOOK_SECRET_NAME", DEFAULT_WEBHOOK_SECRET_NAME).strip()
        or DEFAULT_WEBHOOK_SECRET_NAME
    )


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def credential_from_headers(headers: Mapping[str, str]) -> str | None:
    # `authorization` wins unless empty; `auth` is for tools that cannot set it.
    return headers.get("authorization") or headers.get("auth")


class SharedSecretVerifier:
    """
    Permits a request iff its credential header equals the stored secret.
    """

    def __init__(self, name: str, *, header: str | None = None) -> None:
        self.name = name
        self.header = header

    def _credential(self, headers: Mapping[str, str]) -> str | None:
        if self.header is not None:
            return headers.get(self.header)
        return credential_from_headers(headers)

    def verify(self, headers: Mapping[str, str]) -> bool:
        try:
            expected = secrets.get_secret(self.name)
        except Exception:
            logger.exception("authorization_check_failed secret=%s", self.name)
            return False

        provided = self._credential(headers)
        if provided is None:
            return False
        return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


class JwtBearerVerifier:
    """
    Permits a request carrying `Bearer <token>` signed with the stored secret.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def verify(self, headers: Mapping[str, str]) -> bool:
        raw = (credential_from_headers(headers) or "").strip()
        scheme, _, token = raw.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return False

        try:
            key = secrets.get_secret(self.name)
        except Exception:
            logger.exception("authorization_check_failed secret=%s", self.name)
            return False

        try:
            payload = jwt.decode(token.strip(), key, algorithms=[jwt_algorithm()])
        except jwt.InvalidTokenError:
            return False
        return bool(str(payload.get("sub") or "").strip())


def build_verifier() -> CredentialVerifier:
    scheme = auth_scheme()
    if scheme == "jwt":
        return JwtBearerVerifier(secret_name())
    if scheme != "shared_secret":
        logger.warning("unknown_auth_scheme scheme=%s fallback=shared_secret", scheme)
    return SharedSecretVerifier(secret_name())


def build_webhook_verifier() -> CredentialVerifier:
    return SharedSecretVerifier(webhook_secret_name(), header="x-webhook-secret")
