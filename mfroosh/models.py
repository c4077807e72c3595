from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


class EnquiryRequest(BaseModel):
    name: str = Field(..., description="Visitor's full name")
    email: str = Field(..., description="Reply-to address for the visitor")
    phone: str
    company: Optional[str] = None
    product: str = Field(..., description="Product of interest")
    message: str


class EnquiryResponse(BaseModel):
    success: bool
    message: str
