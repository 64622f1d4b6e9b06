"""
Exceptions raised while deploying firmware to Notehub.

Every failure is fatal to the run; nothing here is retried.
"""

from typing import Optional


class NotehubError(RuntimeError):
    """Base error for the Notehub firmware deployer."""


class InputValidationError(NotehubError):
    """
    Raised before any network call when local input is unusable.

    Examples:
        - project_uid or client credentials missing
        - firmware file not found or unreadable
    """


class TransportError(NotehubError):
    """Raised when a request never produced a response (DNS, connect, timeout)."""


class ProtocolError(NotehubError):
    """
    Raised when Notehub answers with a non-2xx status, or with a 2xx whose
    body breaks the expected contract (empty token, missing filename).
    """

    def __init__(
        self, message: str, status_code: Optional[int] = None, body: str = ""
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(NotehubError):
    """Raised when a response body or request payload cannot be (de)serialized."""


class DeploymentError(NotehubError):
    """Raised by the orchestrator; records which stage of the run failed."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage
