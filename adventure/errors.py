from __future__ import annotations


class AdventureError(Exception):
    """Base class for domain errors raised by the adventure server and client."""


class SessionNotFound(AdventureError):
    def __init__(self, session_id: str) -> None:
        super().__init__("Session not found")
        self.session_id = session_id


class SessionCompleted(AdventureError):
    """A result was applied to a session that already reached victory."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session already completed")
        self.session_id = session_id


class SessionBusy(AdventureError):
    def __init__(self, session_id: str) -> None:
        super().__init__("Session is busy")
        self.session_id = session_id


class ChallengeConfigurationError(AdventureError):
    """A challenge module is missing, malformed, or failed to start.

    Always a content/registration bug: never retried, never counted as a failed attempt.
    """


class ChallengeNotRegistered(ChallengeConfigurationError):
    def __init__(self, challenge_id: str) -> None:
        super().__init__(f"Challenge not registered: {challenge_id}")
        self.challenge_id = challenge_id


class AttemptRejected(AdventureError):
    """An attempt was refused without touching session state."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ApiUnavailable(AdventureError):
    """Transient transport failure talking to the adventure server."""
