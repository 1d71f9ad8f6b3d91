"""Review submission and click models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ReviewPayload(BaseModel):
    """Raw ``POST /api/review`` body.

    Fields are untyped on purpose: the validator owns the rules and the
    error messages, so anything JSON-shaped has to reach it.
    """

    name: Any = None
    rating: Any = None
    reason: Any = None


class GoogleClickPayload(BaseModel):
    """Guest opened the Google review link."""

    name: Any = None


class MasterClickPayload(BaseModel):
    """Guest opened the review page of a specific master."""

    name: Any = None
    rating: Any = None
    master: Any = None


class ReviewSubmission(BaseModel):
    """A validated review, ready to be formatted and relayed."""

    name: str
    rating: int = Field(..., ge=1, le=5)
    reason: str = ""

    @property
    def is_negative(self) -> bool:
        return self.rating < 5


class ReviewResponse(BaseModel):
    """Response after a review has been relayed."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    redirect_url: str | None = Field(None, alias="redirectUrl")


class ClickResponse(BaseModel):
    """Response for click tracking endpoints."""

    success: bool = True
    deduped: bool | None = None

