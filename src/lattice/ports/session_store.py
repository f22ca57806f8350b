"""Session state persistence interface."""

from typing import Protocol

from lattice.core.session import SessionState


class SessionStore(Protocol):
    """Interface for keeping interaction state between runs."""

    def load(self) -> SessionState:
        """Load saved state, or an empty state if none was saved."""
        ...

    def save(self, state: SessionState) -> None:
        """Persist state."""
        ...

    def clear(self) -> None:
        """Forget saved state."""
        ...
