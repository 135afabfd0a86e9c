# Session package
# Exports the controller, its state and the session registry.

from .state import ConsultationState, SessionError, SessionState
from .controller import SessionController
from .store import SessionStore

__all__ = ["ConsultationState", "SessionController", "SessionError", "SessionState", "SessionStore"]
