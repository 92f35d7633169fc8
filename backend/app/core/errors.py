"""Domain exceptions raised by the chat services."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ChatError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ChatError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class AuthorNotFound(NotFoundError):
    default_message = "Author user does not exist"


class RecipientNotFound(NotFoundError):
    default_message = "Recipient user does not exist"


class ReplyTargetNotFound(NotFoundError):
    default_message = "Reply target message does not exist"


class AccessDeniedError(ChatError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotAMember(AccessDeniedError):
    """Raised when the author does not belong to the destination."""

    default_message = "User is not a member of the specified conversation"


class InvalidInputError(ChatError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class InvalidDestination(InvalidInputError):
    default_message = "Message must have exactly one destination (channel, group, or recipient)"


class ReplyCrossConversation(InvalidInputError):
    default_message = "Reply must be to message in same conversation"


class FileTooLarge(InvalidInputError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "File too large"


class ConflictError(ChatError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    """Render a :class:`ChatError` using FastAPI's ``{"detail": ...}`` shape."""

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


__all__ = [
    "ChatError",
    "NotFoundError",
    "AuthorNotFound",
    "RecipientNotFound",
    "ReplyTargetNotFound",
    "AccessDeniedError",
    "NotAMember",
    "InvalidInputError",
    "InvalidDestination",
    "ReplyCrossConversation",
    "FileTooLarge",
    "ConflictError",
    "chat_error_handler",
]
