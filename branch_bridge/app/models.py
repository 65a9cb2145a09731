"""
Data Models Module

This module defines Pydantic models for the values that flow through the
bridge pipeline.

Models are organized by functional area:
- Inbound models (typed view over the client request body)
- Upstream models (selected target, outgoing request description)
- System models (health check, error body)
"""

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Inbound Models
# ============================================================================

class BridgeRequestBody(BaseModel):
    """
    Typed view over the parsed body of an inbound request.

    Only the two fields the bridge acts on are declared; everything else the
    client sends is kept as extra data and forwarded untouched as raw bytes.
    """

    model_config = ConfigDict(extra="allow")

    branch_key: Optional[str] = Field(None, description="Branch key checked against the allow-list")
    os: Optional[str] = Field(None, description="Client platform, selects the upstream host")

    @field_validator("branch_key", "os", mode="before")
    @classmethod
    def drop_non_string(cls, v: Any) -> Optional[str]:
        """Numbers, lists and objects are treated as absent, never coerced"""
        if isinstance(v, str):
            return v
        return None


# ============================================================================
# Upstream Models
# ============================================================================

class UpstreamTarget(BaseModel):
    """Selected upstream base URL paired with the forwarded path."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="One of the fixed Branch API base URLs, with trailing slash")
    path: str = Field(..., description="Inbound path without its leading slash")

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"


class OutgoingRequest(BaseModel):
    """Everything needed to issue the upstream call."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(..., description="HTTP method, identical to the inbound method")
    url: str = Field(..., description="Full upstream URL")
    headers: List[Tuple[str, str]] = Field(default_factory=list, description="Sanitized request headers")
    params: List[Tuple[str, str]] = Field(default_factory=list, description="Query parameters, repeated keys kept")
    content: bytes = Field(default=b"", description="Raw inbound body")


class UpstreamResponse(BaseModel):
    """What the upstream answered, body kept as raw bytes."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., description="Upstream HTTP status code")
    headers: List[Tuple[str, str]] = Field(default_factory=list, description="Upstream response headers")
    content: bytes = Field(default=b"", description="Raw upstream body")


# ============================================================================
# System Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")


class ErrorResponse(BaseModel):
    """Error body returned when the bridge answers a request itself."""
    message: str = Field(..., description="Human-readable error message")
