"""Pydantic schemas for validating action payloads at the host boundary."""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class _ActionInput(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _clamp_non_negative(value: int) -> int:
    return max(0, value)


class TossInput(_ActionInput):
    """Record wearing ``count`` items of a category."""

    category_id: str = Field(min_length=1)
    count: int = 1

    @field_validator("count")
    @classmethod
    def _clamp_count(cls, value: int) -> int:
        return _clamp_non_negative(value)


class AcquireInput(_ActionInput):
    category_id: str = Field(min_length=1)
    count: int = 1
    price: float = 0.0

    @field_validator("count")
    @classmethod
    def _clamp_count(cls, value: int) -> int:
        return _clamp_non_negative(value)

    @field_validator("price")
    @classmethod
    def _clamp_price(cls, value: float) -> float:
        return max(0.0, value)


class RetireInput(_ActionInput):
    category_id: str = Field(min_length=1)
    count: int = 1
    reason: str = "worn_out"

    @field_validator("count")
    @classmethod
    def _clamp_count(cls, value: int) -> int:
        return _clamp_non_negative(value)


class BagInput(_ActionInput):
    """Stage items of a category, addressed by name, into the hamper."""

    category_name: str = Field(min_length=1)
    count: int = 1

    @field_validator("count")
    @classmethod
    def _clamp_count(cls, value: int) -> int:
        return _clamp_non_negative(value)


class CategoryRefInput(_ActionInput):
    category_id: str = Field(min_length=1)


class DispatchInput(_ActionInput):
    bag_contents: Dict[str, int] | None = None

    @field_validator("bag_contents")
    @classmethod
    def _drop_non_positive(cls, value: Dict[str, int] | None) -> Dict[str, int] | None:
        if value is None:
            return None
        return {name: count for name, count in value.items() if count > 0}


class CompleteBatchInput(_ActionInput):
    batch_id: str = Field(min_length=1)


class AddCategoryInput(_ActionInput):
    name: str = Field(min_length=1)
    emoji: str = ""
    initial_count: int = 0

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name cannot be blank")
        return stripped

    @field_validator("initial_count")
    @classmethod
    def _clamp_count(cls, value: int) -> int:
        return _clamp_non_negative(value)


class HibernationInput(_ActionInput):
    category_id: str = Field(min_length=1)
    hibernated: bool


class QuickFillInput(_ActionInput):
    per_category: int = Field(default=2, ge=1)


class ValidationResult(BaseModel):
    """Review payload returned when an action payload is malformed."""

    status: Literal["rejected"] = "rejected"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "AcquireInput",
    "AddCategoryInput",
    "BagInput",
    "CategoryRefInput",
    "CompleteBatchInput",
    "DispatchInput",
    "HibernationInput",
    "QuickFillInput",
    "RetireInput",
    "TossInput",
    "ValidationResult",
    "validation_failure",
]
