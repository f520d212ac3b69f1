"""Standardized API Response Schemas"""

from typing import Generic, TypeVar
from pydantic import BaseModel, Field


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.
    
    Example:
        {
            "success": true,
            "data": {...},
            "message": "Operation successful"
        }
    """
    success: bool = True
    data: T
    message: str = "Operation successful"


class ErrorDetail(BaseModel):
    """Error details structure"""
    code: str
    message: str


class ErrorResponse(BaseModel):
    """
    Standard error response envelope.
    
    Example:
        {
            "success": false,
            "error": {
                "code": "BILL_INVALID",
                "message": "Total amount must be greater than 0"
            }
        }
    """
    success: bool = False
    error: ErrorDetail


class RevealMeta(BaseModel):
    """Progressive ("reveal more") pagination metadata"""
    total: int = Field(..., ge=0, description="Rows matching the criteria")
    visible: int = Field(..., ge=0, description="Rows returned")
    batch_size: int = Field(..., ge=1, description="Rows added per reveal")
    has_more: bool
    active_filters: int = Field(0, ge=0, description="Criteria that differ from the defaults")


class RevealedResponse(BaseModel, Generic[T]):
    """
    Progressively revealed list with metadata.
    
    Example:
        {
            "success": true,
            "data": [...],
            "meta": {
                "total": 40,
                "visible": 15,
                "batch_size": 15,
                "has_more": true,
                "active_filters": 1
            },
            "message": "Operation successful"
        }
    """
    success: bool = True
    data: list[T]
    meta: RevealMeta
    message: str = "Operation successful"
