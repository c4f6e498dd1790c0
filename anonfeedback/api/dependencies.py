"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from anonfeedback.api.tokens import decode_access_token
from anonfeedback.config.settings import Settings, get_settings
from anonfeedback.domain.accounts import AccountService
from anonfeedback.domain.exceptions import Unauthorized
from anonfeedback.domain.ports import AccountRepository, EmailSender


def get_repository(request: Request) -> AccountRepository:
    """
    Get the account repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_email_sender(request: Request) -> EmailSender:
    """Get the email sender created at startup."""
    return request.app.state.email_sender


def get_account_service(
    request: Request, settings: Settings = Depends(get_settings)
) -> AccountService:
    """
    Create account service with injected dependencies.

    Wires together the repository and email sender for the domain service.
    """
    return AccountService(
        repository=get_repository(request),
        email_sender=get_email_sender(request),
        code_ttl=timedelta(seconds=settings.verification_code_ttl_seconds),
        bcrypt_cost=settings.bcrypt_cost,
    )


# Bearer token security scheme for OpenAPI documentation
http_bearer = HTTPBearer(auto_error=False)


def get_current_account_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Resolve the caller's account id from the bearer token.

    Raises:
        Unauthorized: Missing, malformed, expired or invalid token
    """
    if credentials is None:
        raise Unauthorized()
    return decode_access_token(credentials.credentials, settings.jwt_secret, settings.jwt_algorithm)
