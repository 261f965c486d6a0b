from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error detail"""
    code: str = Field(..., description="Error code (e.g., 'MALFORMED_XML', 'TIMESTAMP_FORMAT')")
    message: str = Field(..., description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field("ok", description="Status indicator")
