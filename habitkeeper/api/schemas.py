from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response from the health check endpoint."""

    status: str = Field(description="Service status")
    version: str = Field(description="API version")
    evaluate_on_mutation: bool = Field(description="Whether writes trigger an achievement check")


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
