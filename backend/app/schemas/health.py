"""
Chirp Backend — Health Response Schema
=======================================

The only REST payload the service returns; everything else is GraphQL.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Returned by GET /health for container probes and load balancers."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Backend version string")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the process started")
