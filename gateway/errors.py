"""
Typed gateway failures.

The gateway reports every failure as a JSON body with a free-text message.
The client turns those bodies into the exception types below so callers
never have to compare message strings.
"""

from typing import Optional


class GatewayError(Exception):
    """Uncategorized gateway or transport failure"""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code

    def __str__(self) -> str:
        return self.message


class GatewayNotFoundError(GatewayError):
    """Requested object (volume, pool, SDC, system) does not exist"""


class GatewayAlreadyExistsError(GatewayError):
    """An object with the requested name already exists"""


class GatewayAuthenticationError(GatewayError):
    """Login rejected or session token expired"""
