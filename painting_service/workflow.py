"""
workflow.py — Order Configuration Wizard

This module contains the state machine that walks a customer through
configuring a custom painting order and submitting it.

Workflow Overview:
1. Style selection (styles loaded once from the catalog)
2. Details: reference image, customer notes, AI prompt
3. Specs: canvas size, material, rush flag
4. AI preview via the preview service
5. Review of the computed price and submission to the order store

The wizard owns a single `OrderDraft`; every step edits the same draft, and
moving backwards never loses data. Each external call (catalog, preview,
order store) is the only point where the wizard suspends. If the wizard is
abandoned while a call is pending, the late result is discarded.
"""

import logging
import uuid
from enum import Enum, IntEnum
from typing import List, Optional

import httpx

from .catalog import StyleCatalog
from .clients import OrderStoreClient
from .domain import Identity, Order, OrderDraft, PaintingStyle, PriceBreakdown, ORDER_STATUS_PREVIEWED
from .errors import (
    CatalogUnavailable,
    InvalidInput,
    MissingStyle,
    OrderPersistFailed,
    OrderWorkflowError,
    StepError,
    SubmitInProgress,
    WizardClosed,
)
from .models import WizardView
from .preview import PreviewGenerator, resolve_prompt_text
from .pricing import compute_price

log = logging.getLogger(__name__)


class WizardStep(IntEnum):
    STYLE_SELECT = 1
    DETAILS = 2
    SPECS = 3
    PREVIEW = 4
    REVIEW_SUBMIT = 5


class WizardState(str, Enum):
    ACTIVE = "active"
    SUBMITTED = "submitted"
    ABANDONED = "abandoned"


EDITABLE_FIELDS = {
    "style_id",
    "canvas_size",
    "material",
    "is_rush",
    "customer_notes",
    "ai_prompt",
    "reference_image",
}


class OrderWizard:
    """
    Multi-step order configuration for one authenticated customer.

    Navigation is permissive: `next_step()` never checks the draft, defaults
    are valid selections. The checks that matter for the order record run in
    `submit()`.
    """
    def __init__(
        self,
        identity: Identity,
        catalog: StyleCatalog,
        previews: PreviewGenerator,
        orders: OrderStoreClient,
    ):
        self.wizard_id = str(uuid.uuid4())
        self.identity = identity
        self.catalog = catalog
        self.previews = previews
        self.orders = orders

        self.step = WizardStep.STYLE_SELECT
        self.state = WizardState.ACTIVE
        self.draft = OrderDraft()
        self.styles: List[PaintingStyle] = []
        self.catalog_error: Optional[str] = None
        self.preview_visible = False
        self.preview_prompt: Optional[str] = None
        self.order: Optional[Order] = None

        self._styles_loaded = False
        self._submitting = False
        self.log_prefix = f"[Wizard: {self.wizard_id}]"

    # --- State helpers ---
    @property
    def is_closed(self) -> bool:
        return self.state != WizardState.ACTIVE

    def _ensure_open(self):
        if self.is_closed:
            raise WizardClosed(f"This order wizard is already {self.state.value}.")

    # --- Style catalog ---
    async def start(self) -> List[PaintingStyle]:
        """Loads the style catalog once. Later calls return the loaded styles."""
        self._ensure_open()
        if not self._styles_loaded:
            await self._load_styles()
        return self.styles

    async def reload_styles(self) -> List[PaintingStyle]:
        """User-triggered reload, e.g. after the catalog was unavailable."""
        self._ensure_open()
        await self._load_styles()
        return self.styles

    async def _load_styles(self):
        try:
            styles = await self.catalog.load_active_styles()
        except CatalogUnavailable as e:
            if self.is_closed:
                log.warning(f"{self.log_prefix} Catalog failure after wizard was {self.state.value}; ignored.")
                return
            # Styles from an earlier successful load stay selectable
            log.error(f"{self.log_prefix} Style catalog unavailable, keeping {len(self.styles)} loaded style(s): {e.message}")
            self.catalog_error = e.message
            self._styles_loaded = True
            return

        if self.is_closed:
            log.warning(f"{self.log_prefix} Styles arrived after wizard was {self.state.value}; discarded.")
            return
        self.styles = styles
        self.catalog_error = None
        self._styles_loaded = True

    @property
    def selected_style(self) -> Optional[PaintingStyle]:
        if not self.draft.style_id:
            return None
        for style in self.styles:
            if style.id == self.draft.style_id:
                return style
        return None

    # --- Navigation ---
    def next_step(self) -> WizardStep:
        self._ensure_open()
        if self.step < WizardStep.REVIEW_SUBMIT:
            self.step = WizardStep(self.step + 1)
            log.info(f"{self.log_prefix} Moved forward to step {self.step.value} ({self.step.name}).")
        return self.step

    def previous_step(self) -> WizardStep:
        self._ensure_open()
        if self.step > WizardStep.STYLE_SELECT:
            self.step = WizardStep(self.step - 1)
            log.info(f"{self.log_prefix} Moved back to step {self.step.value} ({self.step.name}).")
        return self.step

    # --- Draft editing ---
    def update_draft(self, **fields) -> OrderDraft:
        """
        Applies field edits to the draft, all or nothing.

        Args:
            **fields: Any of style_id, canvas_size, material, is_rush,
                customer_notes, ai_prompt, reference_image.
        Returns:
            OrderDraft: The updated draft.
        Raises:
            InvalidInput: On an unknown field, an invalid value, or a style id
                that is not among the loaded active styles.
            WizardClosed: If the wizard was submitted or abandoned.
        """
        self._ensure_open()
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInput(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        style_id = fields.get("style_id")
        if style_id and style_id not in {style.id for style in self.styles}:
            raise InvalidInput(f"Unknown or inactive painting style: {style_id}")

        candidate = self.draft.model_copy()
        try:
            for name, value in fields.items():
                setattr(candidate, name, value)
        except ValueError as e:
            raise InvalidInput(f"Invalid order details: {e}")

        self.draft = candidate
        return self.draft

    def attach_reference_image(self, reference: str) -> OrderDraft:
        return self.update_draft(reference_image=reference)

    def clear_reference_image(self) -> OrderDraft:
        return self.update_draft(reference_image=None)

    def price(self) -> PriceBreakdown:
        return compute_price(self.draft.canvas_size, self.draft.is_rush)

    # --- Preview ---
    async def generate_preview(self) -> Optional[str]:
        """
        Generates an AI preview for the current prompt text and selected style.

        The step cursor does not move; on success the preview becomes visible.
        Returns:
            str: The preview image reference, or None if the wizard was
                abandoned while the call was pending.
        Raises:
            EmptyPrompt: If neither AI prompt nor customer notes have text (no call is made).
            PreviewInProgress: If a generation is already running.
            GenerationFailed: If the service failed; the previous preview is kept.
        """
        self._ensure_open()
        try:
            prompt_text = resolve_prompt_text(self.draft.ai_prompt, self.draft.customer_notes)
        except OrderWorkflowError as e:
            log.warning(f"{self.log_prefix} Preview rejected: {e.message}")
            raise

        style = self.selected_style
        log.info(f"{self.log_prefix} Requesting AI preview (style: {style.english_name if style else 'none'}).")
        try:
            image_ref = await self.previews.generate(prompt_text, style)
        except OrderWorkflowError as e:
            log.warning(f"{self.log_prefix} Preview not generated: {e.message}")
            raise

        if self.is_closed:
            log.warning(f"{self.log_prefix} Preview arrived after wizard was {self.state.value}; discarded.")
            return None

        self.draft.preview_image_ref = image_ref
        self.preview_prompt = prompt_text
        self.preview_visible = True
        log.info(f"{self.log_prefix} AI preview ready: {image_ref}")
        return image_ref

    # --- Submission ---
    async def submit(self) -> Optional[Order]:
        """
        Prices the draft and persists it as a single order with status "previewed".

        Returns:
            Order: The stored order including the id assigned by the store,
                or None if the wizard was abandoned while the insert was pending.
        Raises:
            StepError: If the wizard is not at the review step.
            MissingStyle: If no style is selected.
            SubmitInProgress: If a submission is already pending.
            OrderPersistFailed: If the store rejected the order; the draft is kept for a retry.
        """
        self._ensure_open()
        if self.step != WizardStep.REVIEW_SUBMIT:
            raise StepError(f"Orders can only be submitted from step {WizardStep.REVIEW_SUBMIT.value}.")
        if self._submitting:
            log.warning(f"{self.log_prefix} Duplicate submit ignored; first submission still pending.")
            raise SubmitInProgress()
        style = self.selected_style
        if style is None:
            raise MissingStyle()

        price = self.price()
        order = Order(
            user_id=self.identity.user_id,
            style_id=style.id,
            canvas_size=self.draft.canvas_size,
            material=self.draft.material,
            ai_prompt=self.draft.ai_prompt,
            customer_notes=self.draft.customer_notes,
            preview_image_ref=self.draft.preview_image_ref,
            reference_image=self.draft.reference_image,
            base_price=price.base_price,
            rush_fee=price.rush_fee,
            total_price=price.total_price,
            is_rush=self.draft.is_rush,
            status=ORDER_STATUS_PREVIEWED,
        )

        log.info(f"{self.log_prefix} Submitting order (total: {price.total_price}).")
        self._submitting = True
        try:
            row = await self.orders.insert_order(order.insert_payload())
            order_id = row.get("id") if isinstance(row, dict) else None
            if order_id is None:
                raise ValueError("store returned no order id")
        except (httpx.HTTPError, ValueError) as e:
            log.error(f"{self.log_prefix} Order could not be saved, draft kept for retry: {e}")
            raise OrderPersistFailed(f"Your order could not be saved, please try again. ({e})")
        finally:
            self._submitting = False

        stored = order.model_copy(update={"id": str(order_id)})
        if self.is_closed:
            log.warning(f"{self.log_prefix} Order {stored.id} saved after wizard was {self.state.value}.")
            return None

        self.order = stored
        self.state = WizardState.SUBMITTED
        log.info(f"{self.log_prefix} Order {stored.id} submitted with status '{stored.status}'.")
        return stored

    def abandon(self):
        """Discards the wizard without submitting. Repeated calls are no-ops."""
        if self.is_closed:
            return
        self.state = WizardState.ABANDONED
        log.info(f"{self.log_prefix} Wizard abandoned at step {self.step.value}.")

    def snapshot(self) -> WizardView:
        return WizardView(
            wizardId=self.wizard_id,
            state=self.state.value,
            currentStep=int(self.step),
            draft=self.draft,
            styles=self.styles,
            catalogError=self.catalog_error,
            price=self.price(),
            previewVisible=self.preview_visible,
            previewPrompt=self.preview_prompt,
            previewPending=self.previews.is_pending,
            submitting=self._submitting,
        )
