"""
Data models for the Notehub firmware deployer.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Authenticated Notehub session, produced by a successful authenticate."""

    base_url: str
    access_token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.access_token}"}

    def __repr__(self) -> str:
        return f"Session(base_url={self.base_url!r}, access_token='***')"


@dataclass(frozen=True)
class UploadResult:
    """Result of a firmware upload."""

    filename: str  # name assigned by Notehub; may differ from the local name
    size_bytes: int = 0


@dataclass(frozen=True)
class DfuResponse:
    """Best-effort view of the DFU trigger response."""

    success: Optional[bool] = None
    message: str = ""
    raw: str = ""


@dataclass
class DeploymentResult:
    """Outcome of a complete deployment run."""

    status: str  # "success" or "failed"
    filename: Optional[str] = None
    dfu_triggered: bool = False
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    duration_seconds: Optional[float] = None
    error_message: Optional[str] = None
