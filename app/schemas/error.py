from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized error response schema."""
    error: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Error code for programmatic handling")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    trace_id: Optional[str] = Field(None, description="Request trace ID for debugging")

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "Invalid package",
                "code": "VAL_2002",
                "details": {"package": "bronze"},
                "trace_id": "123e4567-e89b-12d3-a456-426614174000"
            }
        }
    }
