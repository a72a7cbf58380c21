"""
Auth State Machine for the client session lifecycle.

anonymous -> authenticating -> authenticated -> anonymous

AUTHENTICATING only exists while a sign-in/sign-up/restore call is awaiting
the identity provider, it is never the resting state of a session.
"""

import logging
from typing import Dict, List, Set

from enums.auth_state import AuthState
from exceptions.auth import InvalidAuthStateException

logger = logging.getLogger(__name__)


class AuthStateTransition:
    """Represents a valid state transition with metadata"""

    def __init__(self, from_state: AuthState, to_state: AuthState, description: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        self.description = description

    def __repr__(self):
        return f"{self.from_state.value} -> {self.to_state.value}"


class AuthStateMachine:
    """
    Valid transitions:
    - ANONYMOUS -> AUTHENTICATING (sign-in, sign-up or restore started)
    - AUTHENTICATING -> AUTHENTICATED (identity provider accepted)
    - AUTHENTICATING -> ANONYMOUS (identity provider rejected)
    - AUTHENTICATED -> ANONYMOUS (sign-out, expiry, remote logout)
    - AUTHENTICATED -> AUTHENTICATING (signing in again as another user)

    Staying in the same state is always allowed (token refresh, profile reload).
    """

    VALID_TRANSITIONS: List[AuthStateTransition] = [
        AuthStateTransition(AuthState.ANONYMOUS, AuthState.AUTHENTICATING,
                            description="Credentials submitted"),
        AuthStateTransition(AuthState.AUTHENTICATING, AuthState.AUTHENTICATED,
                            description="Identity provider accepted the credentials"),
        AuthStateTransition(AuthState.AUTHENTICATING, AuthState.ANONYMOUS,
                            description="Identity provider rejected the credentials"),
        AuthStateTransition(AuthState.AUTHENTICATED, AuthState.ANONYMOUS,
                            description="Session ended"),
        AuthStateTransition(AuthState.AUTHENTICATED, AuthState.AUTHENTICATING,
                            description="Switching account"),
    ]

    _transition_map: Dict[AuthState, Set[AuthState]] = {}

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return
        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_state, set()).add(transition.to_state)

    @classmethod
    def is_valid_transition(cls, from_state: AuthState, to_state: AuthState) -> bool:
        cls._build_transition_map()
        if from_state == to_state:
            return True
        return to_state in cls._transition_map.get(from_state, set())

    @classmethod
    def get_valid_transitions(cls, from_state: AuthState) -> List[AuthState]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_state, set()), key=lambda s: s.value)

    @classmethod
    def transition(cls, from_state: AuthState, to_state: AuthState) -> AuthState:
        """
        Validate a transition and return the new state.

        Raises:
            InvalidAuthStateException: If the transition is not allowed
        """
        if not cls.is_valid_transition(from_state, to_state):
            logger.error(f"Invalid auth transition: {from_state.value} -> {to_state.value}")
            raise InvalidAuthStateException(from_state.value, to_state.value)
        if from_state != to_state:
            logger.debug(f"Auth state: {from_state.value} -> {to_state.value}")
        return to_state
