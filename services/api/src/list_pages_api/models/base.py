"""Base Pydantic response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BaseResponse(BaseModel):
    """Base response model with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(
        default=None, description="Field that caused the error (for validation errors)"
    )
    message: str = Field(description="Error message")
    type: str | None = Field(default=None, description="Error type code")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: dict[str, Any] = Field(description="Error details")

    @classmethod
    def create(
        cls,
        code: int,
        message: str,
        correlation_id: str | None = None,
        details: list[ErrorDetail] | None = None,
    ) -> "ErrorResponse":
        """Create a standardized error response.

        Args:
            code: HTTP status code.
            message: Error message.
            correlation_id: Request correlation ID.
            details: Additional error details.

        Returns:
            ErrorResponse instance.
        """
        error: dict[str, Any] = {
            "code": code,
            "message": message,
        }
        if correlation_id:
            error["correlation_id"] = correlation_id
        if details:
            error["details"] = [d.model_dump() for d in details]

        return cls(error=error)


class PagerMeta(BaseModel):
    """Pager metadata for a 0-indexed list page."""

    current_page: int = Field(ge=0, description="Current page number (0-indexed)")
    items_per_page: int = Field(ge=1, description="Items per page")
    total: int = Field(ge=0, description="Total number of items")
    total_pages: int = Field(ge=0, description="Total number of pages")
    has_next: bool = Field(description="Whether there is a next page")
    has_prev: bool = Field(description="Whether there is a previous page")

    @classmethod
    def create(
        cls,
        current_page: int,
        items_per_page: int,
        total: int,
    ) -> "PagerMeta":
        """Create pager metadata.

        Args:
            current_page: Current page number (0-indexed).
            items_per_page: Items per page.
            total: Total number of items.

        Returns:
            PagerMeta instance.
        """
        total_pages = (total + items_per_page - 1) // items_per_page

        return cls(
            current_page=current_page,
            items_per_page=items_per_page,
            total=total,
            total_pages=total_pages,
            has_next=current_page + 1 < total_pages,
            has_prev=current_page > 0,
        )
