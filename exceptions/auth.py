"""
Authentication and session exceptions.
"""

from .base import MonetizeProException


class AuthException(MonetizeProException):
    """Base exception for identity provider and session errors."""
    pass


class InvalidCredentialsException(AuthException):
    """Raised when email/password do not match an account."""

    def __init__(self, email: str):
        super().__init__(
            "Invalid login credentials",
            details={'email': email}
        )
        self.email = email


class WeakPasswordException(AuthException):
    """Raised on sign-up when the password is shorter than the configured minimum."""

    def __init__(self, min_length: int):
        super().__init__(
            f"Password should be at least {min_length} characters",
            details={'min_length': min_length}
        )
        self.min_length = min_length


class InvalidEmailException(AuthException):
    """Raised on sign-up when the email address is malformed."""

    def __init__(self, email: str):
        super().__init__(
            f"Unable to validate email address: {email}",
            details={'email': email}
        )
        self.email = email


class EmailAlreadyRegisteredException(AuthException):
    """Raised on sign-up when an account with the email exists."""

    def __init__(self, email: str):
        super().__init__(
            "User already registered",
            details={'email': email}
        )
        self.email = email


class AuthenticationRequiredException(AuthException):
    """Raised when an operation needs a signed-in user and the session is anonymous."""

    def __init__(self, action: str):
        super().__init__(
            f"Sign in required to {action}",
            details={'action': action}
        )
        self.action = action


class SessionExpiredException(AuthException):
    """Raised when an access token is unknown or past its expiry."""

    def __init__(self):
        super().__init__("Session expired, please sign in again")


class SessionMismatchException(AuthException):
    """Raised when a request drives a signed-in client without that client's access token."""

    def __init__(self):
        super().__init__("Access token does not match the session of this client")


class InvalidAuthStateException(AuthException):
    """Raised on a transition the auth state machine does not allow."""

    def __init__(self, current_state: str, requested_state: str):
        super().__init__(
            f"Cannot move auth state from '{current_state}' to '{requested_state}'",
            details={'current_state': current_state, 'requested_state': requested_state}
        )
        self.current_state = current_state
        self.requested_state = requested_state
