"""
models.py — API Data Models for the Painting Order Service

This module defines the request and response payloads of the HTTP API.
It uses Pydantic models to validate incoming data before it reaches the workflow.

Models:
    - SignUpRequest / SignInRequest: credentials for the identity gate.
    - SessionResponse: the session handle returned after sign-in.
    - DraftUpdateRequest: partial update of the order draft.
    - WizardView: snapshot of a wizard (step, draft, styles, price).
    - OrderResponse: the submitted order.
"""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .domain import CanvasSize, Material, Order, OrderDraft, PaintingStyle, PriceBreakdown


class SignUpRequest(BaseModel):
    """
    Represents a customer registration.

    Attributes:
        fullName (str): Display name, at least 2 characters after trimming.
        email (EmailStr): Sign-in email address.
        password (str): At least 6 characters.
    """
    fullName: str
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("fullName")
    @classmethod
    def _full_name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("full name must be at least 2 characters")
        return value


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    sessionId: str
    userId: str
    email: str


class DraftUpdateRequest(BaseModel):
    """
    Partial update of the order draft. Omitted fields stay unchanged.
    The preview image cannot be set here; it only comes from generation.
    """
    styleId: Optional[str] = None
    canvasSize: Optional[CanvasSize] = None
    material: Optional[Material] = None
    isRush: Optional[bool] = None
    customerNotes: Optional[str] = None
    aiPrompt: Optional[str] = None
    referenceImage: Optional[str] = None

    def to_draft_fields(self) -> dict:
        """Maps the set fields onto `OrderDraft` field names."""
        names = {
            "styleId": "style_id",
            "canvasSize": "canvas_size",
            "material": "material",
            "isRush": "is_rush",
            "customerNotes": "customer_notes",
            "aiPrompt": "ai_prompt",
            "referenceImage": "reference_image",
        }
        return {names[key]: value for key, value in self.model_dump(exclude_unset=True).items()}


class WizardView(BaseModel):
    wizardId: str
    state: str
    currentStep: int
    draft: OrderDraft
    styles: List[PaintingStyle]
    catalogError: Optional[str] = None
    price: PriceBreakdown
    previewVisible: bool
    previewPrompt: Optional[str] = None
    previewPending: bool
    submitting: bool


class OrderResponse(BaseModel):
    wizardId: str
    order: Optional[Order] = None
