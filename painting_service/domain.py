"""
domain.py — Domain Records for the Painting Order Workflow

Models:
    - CanvasSize / Material: the enumerated order specifications.
    - Identity: the authenticated customer handle supplied by the identity provider.
    - PaintingStyle: one immutable row of the style catalog.
    - PriceBreakdown: result of the pricing policy.
    - OrderDraft: the mutable order configuration owned by one wizard.
    - Order: the terminal record handed to the order store.

Rows coming from collaborators are validated into these shapes at the client
boundary, so nothing untyped reaches pricing or prompt composition.
"""

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CanvasSize(str, Enum):
    """Canvas sizes in centimetres, ordered from small to extra-large."""
    SMALL = "30x40"
    MEDIUM = "50x70"
    LARGE = "70x100"
    EXTRA_LARGE = "100x150"


class Material(str, Enum):
    OIL = "oil"
    WATERCOLOR = "watercolor"
    ACRYLIC = "acrylic"
    PENCIL = "pencil"
    DIGITAL_PRINT = "digital_print"


ORDER_STATUS_PREVIEWED = "previewed"


class Identity(BaseModel):
    """
    The authenticated customer as reported by the identity provider.

    Attributes:
        user_id (str): Opaque user identifier, stored on every order.
        email (str): Sign-in email address.
        full_name (str): Display name, if the provider returned one.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    email: str
    full_name: Optional[str] = None


class PaintingStyle(BaseModel):
    """
    A selectable painting style from the catalog.

    The catalog stores the Persian display name as `name_fa` and the
    external-facing English name as `name_en`; both spellings are accepted.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    localized_name: str = Field(..., validation_alias=AliasChoices("localized_name", "name_fa"))
    english_name: str = Field(..., min_length=1, validation_alias=AliasChoices("english_name", "name_en"))
    description: Optional[str] = None
    is_active: bool


class PriceBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_price: int
    rush_fee: int
    total_price: int


class OrderDraft(BaseModel):
    """
    The in-progress order configuration.

    Assignments are validated, so an invalid canvas size or material can never
    be stored. `preview_image_ref` is only written by a successful preview
    generation.
    """
    model_config = ConfigDict(validate_assignment=True)

    style_id: Optional[str] = None
    canvas_size: CanvasSize = CanvasSize.MEDIUM
    material: Material = Material.OIL
    is_rush: bool = False
    customer_notes: str = ""
    ai_prompt: str = ""
    reference_image: Optional[str] = None
    preview_image_ref: Optional[str] = None


class Order(BaseModel):
    """
    A submitted painting order as persisted by the order store.

    Field names follow the workflow; `by_alias` dumps use the store's column
    names (`ai_preview_url`, `reference_image_url`).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    user_id: str
    style_id: str
    canvas_size: CanvasSize
    material: Material
    ai_prompt: str = ""
    customer_notes: str = ""
    preview_image_ref: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("preview_image_ref", "ai_preview_url"),
        serialization_alias="ai_preview_url",
    )
    reference_image: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("reference_image", "reference_image_url"),
        serialization_alias="reference_image_url",
    )
    base_price: int
    rush_fee: int
    total_price: int
    is_rush: bool
    status: str = ORDER_STATUS_PREVIEWED

    def insert_payload(self) -> dict:
        """Returns the row sent to the order store (no id, store column names)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})
