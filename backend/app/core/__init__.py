"""Core utilities for the Parley backend."""

from .errors import ChatError, chat_error_handler
from .storage import StoredImage, upload_image

__all__ = ["ChatError", "chat_error_handler", "StoredImage", "upload_image"]
