"""
Operation Models
================

Shared response shapes for mutations.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class OperationResult(BaseModel):
    """
    Outcome of an insert, update or delete.

    `records_affected` is the number of documents the store actually changed;
    `success` is true when that number is above zero.
    """
    message: str = Field("", description="Human readable outcome")
    success: bool = Field(..., description="Whether any record was changed")
    records_affected: int = Field(0, description="Number of records changed")
    value: Optional[Any] = Field(None, description="Payload, when the operation returns one")

    @classmethod
    def from_count(cls, count: int, success_message: str, failure_message: str) -> "OperationResult":
        """Build a result from a store count, picking the message by outcome."""
        if count > 0:
            return cls(message=success_message, success=True, records_affected=count)
        return cls(message=failure_message, success=False, records_affected=count)
