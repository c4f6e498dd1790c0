"""
API v1 routes.

Defines REST endpoints for the anonymous feedback API. Each endpoint
converts domain errors into the ``{success, message}`` envelope with the
error's status code; anything unexpected is logged and reported as a 500
with an endpoint-specific message.
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError

from anonfeedback.api.dependencies import get_account_service, get_current_account_id
from anonfeedback.api.errors import error_response
from anonfeedback.api.models import (
    AcceptanceStatusResponse,
    AcceptMessagesRequest,
    AcceptMessagesResponse,
    AccountOut,
    ApiResponse,
    MessageOut,
    MessagesResponse,
    SendMessageRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    Username,
    VerifyCodeRequest,
)
from anonfeedback.api.tokens import create_access_token
from anonfeedback.config.settings import Settings, get_settings
from anonfeedback.domain.accounts import AccountService
from anonfeedback.domain.exceptions import InternalError, MessageBoardError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

_username_adapter = TypeAdapter(Username)

_ERRORS = {
    400: {"model": ApiResponse, "description": "Validation error or conflict"},
    500: {"model": ApiResponse, "description": "Internal or upstream failure"},
}
_AUTH_ERRORS = {
    401: {"model": ApiResponse, "description": "Missing or invalid bearer token"},
    404: {"model": ApiResponse, "description": "Account not found"},
    500: {"model": ApiResponse, "description": "Internal failure"},
}


def _internal_error(message: str) -> JSONResponse:
    return error_response(InternalError(message))


@router.post(
    "/sign-up",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Register a new user",
    description="Submit username, email and password to begin registration. "
    "A 6-digit verification code will be sent to the provided email.",
)
async def sign_up(
    request_data: SignUpRequest,
    service: AccountService = Depends(get_account_service),
):
    """
    Register a user, or retry registration of an unverified email.

    - **username**: 3-20 letters, digits or underscores
    - **email**: Valid email address
    - **password**: Password (minimum 6 characters, at most 72 bytes)
    """
    try:
        await service.register(request_data.username, request_data.email, request_data.password)
    except MessageBoardError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error in the sign-up route")
        return _internal_error("Error registering the user")

    return ApiResponse(
        success=True,
        message="User registered successfully. Please check your email for the verification code.",
    )


@router.post(
    "/verify-code",
    response_model=ApiResponse,
    responses={**_ERRORS, 404: {"model": ApiResponse, "description": "Account not found"}},
    summary="Verify account with the emailed code",
)
async def verify_code(
    request_data: VerifyCodeRequest,
    service: AccountService = Depends(get_account_service),
):
    """
    Submit the 6-digit code received by email.

    - **username**: Handle used at sign-up (URL-encoded values are decoded)
    - **code**: 6-digit verification code
    """
    try:
        await service.verify_code(request_data.username, request_data.code)
    except MessageBoardError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error verifying code")
        return _internal_error("Internal server error not able to verify code")

    return ApiResponse(success=True, message="User verified successfully")


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    responses={
        401: {"model": ApiResponse, "description": "Invalid credentials"},
        403: {"model": ApiResponse, "description": "Account not verified"},
        500: {"model": ApiResponse, "description": "Internal failure"},
    },
    summary="Sign in with email or username",
)
async def sign_in(
    request_data: SignInRequest,
    service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_settings),
):
    """Exchange credentials of a verified account for a bearer token."""
    try:
        account = await service.authenticate(request_data.identifier, request_data.password)
    except MessageBoardError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error signing in")
        return _internal_error("Error signing in")

    token = create_access_token(
        account,
        settings.jwt_secret,
        settings.jwt_algorithm,
        timedelta(minutes=settings.access_token_ttl_minutes),
    )
    return SignInResponse(success=True, message="Signed in successfully", access_token=token)


@router.get(
    "/check-username-unique",
    response_model=ApiResponse,
    responses=_ERRORS,
    summary="Check whether a username is available",
)
async def check_username_unique(
    username: str = Query(""),
    service: AccountService = Depends(get_account_service),
):
    """A username is taken only once a verified account holds it."""
    try:
        candidate = _username_adapter.validate_python(username)
    except ValidationError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Invalid Username format"},
        )

    try:
        available = await service.is_username_available(candidate)
    except Exception:
        logger.exception("Error checking username uniqueness")
        return _internal_error("Internal server error")

    if not available:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Username is already taken"},
        )
    return ApiResponse(success=True, message="Username is available")


@router.post(
    "/accept-messages",
    response_model=AcceptMessagesResponse,
    responses=_AUTH_ERRORS,
    summary="Turn message acceptance on or off",
)
async def set_accept_messages(
    request_data: AcceptMessagesRequest,
    account_id: str = Depends(get_current_account_id),
    service: AccountService = Depends(get_account_service),
):
    try:
        account = await service.set_accepting_messages(account_id, request_data.accept_messages)
    except MessageBoardError as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to update message acceptance status")
        return _internal_error("Internal server error unable to update message acceptance status")

    return AcceptMessagesResponse(
        success=True,
        message="Message acceptance status updated successfully",
        account=AccountOut.from_account(account),
    )


@router.get(
    "/accept-messages",
    response_model=AcceptanceStatusResponse,
    responses=_AUTH_ERRORS,
    summary="Read the message acceptance status",
)
async def get_accept_messages(
    account_id: str = Depends(get_current_account_id),
    service: AccountService = Depends(get_account_service),
):
    try:
        accepting = await service.get_accepting_messages(account_id)
    except MessageBoardError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error fetching message acceptance status")
        return _internal_error("Internal server error unable to fetch message acceptance status")

    return AcceptanceStatusResponse(
        success=True,
        message="User found successfully",
        is_accepting_messages=accepting,
    )


@router.post(
    "/send-message",
    response_model=ApiResponse,
    responses={
        **_ERRORS,
        403: {"model": ApiResponse, "description": "Recipient is not accepting messages"},
        404: {"model": ApiResponse, "description": "Recipient not found"},
    },
    summary="Send an anonymous message",
)
async def send_message(
    request_data: SendMessageRequest,
    service: AccountService = Depends(get_account_service),
):
    """No authentication - senders are anonymous."""
    try:
        await service.send_message(request_data.username, request_data.content)
    except MessageBoardError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error sending message")
        return _internal_error("Internal server error unable to send message")

    return ApiResponse(success=True, message="Message sent successfully")


@router.get(
    "/get-messages",
    response_model=MessagesResponse,
    responses=_AUTH_ERRORS,
    summary="List received messages, newest first",
)
async def get_messages(
    account_id: str = Depends(get_current_account_id),
    service: AccountService = Depends(get_account_service),
):
    """
    List the caller's messages, newest first.

    An empty mailbox is a 200 with an empty `messages` list and the message
    "No messages yet"; earlier clients of this API received 404 "No messages
    found for this user" instead. 404 now means the account is gone.
    """
    try:
        messages = await service.get_messages(account_id)
    except MessageBoardError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error getting messages")
        return _internal_error("Internal server error unable to get messages")

    return MessagesResponse(
        success=True,
        message="Messages fetched successfully" if messages else "No messages yet",
        messages=[MessageOut.from_message(m) for m in messages],
    )
