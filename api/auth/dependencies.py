"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from . import security

NOT_AUTHORIZED = "Not authorized"


def get_verifier() -> security.CredentialVerifier:
    return security.build_verifier()


def get_webhook_verifier() -> security.CredentialVerifier:
    return security.build_webhook_verifier()


def _check(request: Request, verifier: security.CredentialVerifier) -> None:
    if not verifier.verify(request.headers):
        # Same status as every other failure; callers only branch on success/error.
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=NOT_AUTHORIZED)


async def require_authorized(
    request: Request,
    verifier: security.CredentialVerifier = Depends(get_verifier),
) -> None:
    _check(request, verifier)


async def require_webhook(
    request: Request,
    verifier: security.CredentialVerifier = Depends(get_webhook_verifier),
) -> None:
    _check(request, verifier)
