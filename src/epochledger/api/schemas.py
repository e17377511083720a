"""Pydantic request schemas for the public API.

Amounts are plain JSON integers (arbitrary size); responses echo them back
as strings so JavaScript clients don't lose precision.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class TransferRequest(BaseModel):
    to: str = Field(..., min_length=1, description="Receiving account")
    amount: int = Field(..., ge=0, description="Amount in base units")
    epoch: Optional[int] = Field(default=None, ge=0, description="Spend only value minted in this epoch")


class TransferFromRequest(BaseModel):
    owner: str = Field(..., min_length=1, description="Account whose allowance is spent")
    to: str = Field(..., min_length=1, description="Receiving account")
    amount: int = Field(..., ge=0)
    epoch: Optional[int] = Field(default=None, ge=0)


class ApproveRequest(BaseModel):
    spender: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0)


class MintRequest(BaseModel):
    to: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0)


class BurnRequest(BaseModel):
    account: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0)
    epoch: Optional[int] = Field(default=None, ge=0)


class ClockRequest(BaseModel):
    """Move the block pointer: either to an absolute height or forward by N blocks."""

    height: Optional[int] = Field(default=None, ge=0)
    advance: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _exactly_one(self) -> "ClockRequest":
        if (self.height is None) == (self.advance is None):
            raise ValueError("provide exactly one of height or advance")
        return self
