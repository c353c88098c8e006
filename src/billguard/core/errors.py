"""
Secure error handling for host components.
"""

from typing import Callable

from .audit import SecurityEventLogger

GENERIC_ERROR_MESSAGE = "An error occurred. Please try again."

ErrorHandler = Callable[[BaseException], str]


def create_secure_error_handler(
    component_name: str,
    audit: SecurityEventLogger,
    environment: str = "development",
) -> ErrorHandler:
    """
    Create an error handler for a named component.

    The handler records the error and returns the message to show the user:
    the error's own message in development, a generic one in production.
    """

    def handle(error: BaseException) -> str:
        audit.log_security_error(component_name, error)
        if environment == "production":
            return GENERIC_ERROR_MESSAGE
        return str(error) or GENERIC_ERROR_MESSAGE

    return handle
