from enum import Enum


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"  # Transient, only drives the loading indicator
    AUTHENTICATED = "authenticated"
