"""Backend bridge — HTTP client for the AION-R API."""

from aionr.backend.client import BackendBridge
from aionr.backend.models import BackendFailure, BackendRequest, BackendResult

__all__ = [
    "BackendBridge",
    "BackendFailure",
    "BackendRequest",
    "BackendResult",
]
