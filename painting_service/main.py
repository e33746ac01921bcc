"""
main.py — FastAPI Entry Point for the Painting Order Service

This module provides the REST API through which the storefront drives the
order configuration wizard.

Responsibilities:
    • Sign customers in and out (sessions are held in memory)
    • Open order wizards for signed-in customers only
    • Expose step navigation, draft editing, live pricing, AI preview and submission
    • Translate workflow errors into JSON error responses
    • Provide system health information
"""

from typing import Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import OrderWorkflowError, ValidationError
from .logging_config import get_logger, setup_logging
from .models import DraftUpdateRequest, OrderResponse, SessionResponse, SignInRequest, SignUpRequest, WizardView
from .domain import PriceBreakdown
from .session import SessionContext, WizardRegistry
from .workflow import OrderWizard

# Initialization
# Configure logging and initialize FastAPI app
setup_logging()
log = get_logger(__name__)
app = FastAPI(title="Painting Order Service")

registry: Optional[WizardRegistry] = None


# Startup / Shutdown: collaborator clients
@app.on_event("startup")
async def on_startup():
    """Creates the collaborator clients and the in-memory session registry."""
    global registry
    log.info("Painting order service starting...")
    registry = WizardRegistry.from_environment()


@app.on_event("shutdown")
async def on_shutdown():
    """Abandons all open wizards and closes the collaborator clients."""
    if registry is not None:
        await registry.aclose()
    log.info("Painting order service stopped.")


# Dependencies
def get_registry() -> WizardRegistry:
    return registry


def get_session(
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
    registry: WizardRegistry = Depends(get_registry),
) -> SessionContext:
    return registry.get_session(x_session_id)


def get_wizard(
    wizard_id: str,
    session: SessionContext = Depends(get_session),
    registry: WizardRegistry = Depends(get_registry),
) -> OrderWizard:
    return registry.get_wizard(session, wizard_id)


@app.exception_handler(OrderWorkflowError)
async def workflow_error_handler(request: Request, exc: OrderWorkflowError):
    """Returns every workflow error as {"errorCode", "message"} with its status code."""
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.error_code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"errorCode": exc.error_code, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Returns malformed request bodies and parameters in the same shape as workflow errors."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    log.warning(f"{request.method} {request.url.path} rejected: {details}")
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"errorCode": ValidationError.error_code, "message": f"Invalid request: {details}"},
    )


# --- Sessions ---
@app.post("/v1/sessions/sign-up", response_model=SessionResponse, status_code=201)
async def sign_up(body: SignUpRequest, registry: WizardRegistry = Depends(get_registry)):
    context = await registry.sign_up(body.fullName, body.email, body.password)
    identity = context.current_user()
    return SessionResponse(sessionId=context.session_id, userId=identity.user_id, email=identity.email)


@app.post("/v1/sessions", response_model=SessionResponse, status_code=201)
async def sign_in(body: SignInRequest, registry: WizardRegistry = Depends(get_registry)):
    context = await registry.sign_in(body.email, body.password)
    identity = context.current_user()
    return SessionResponse(sessionId=context.session_id, userId=identity.user_id, email=identity.email)


@app.delete("/v1/sessions/{session_id}", status_code=204)
async def sign_out(session_id: str, registry: WizardRegistry = Depends(get_registry)):
    await registry.sign_out(session_id)


# --- Order wizard ---
@app.post("/v1/wizards", response_model=WizardView, status_code=201)
async def open_wizard(
    session: SessionContext = Depends(get_session),
    registry: WizardRegistry = Depends(get_registry),
):
    """
    Opens a new order wizard at step 1 and loads the painting styles.

    If the catalog is unavailable the wizard still opens, with no styles and
    `catalogError` set; the client may call `/styles/reload` later.
    """
    wizard = await registry.gate.open_wizard(session)
    return wizard.snapshot()


@app.get("/v1/wizards/{wizard_id}", response_model=WizardView)
async def get_wizard_view(wizard: OrderWizard = Depends(get_wizard)):
    return wizard.snapshot()


@app.patch("/v1/wizards/{wizard_id}/draft", response_model=WizardView)
async def update_draft(body: DraftUpdateRequest, wizard: OrderWizard = Depends(get_wizard)):
    wizard.update_draft(**body.to_draft_fields())
    return wizard.snapshot()


@app.post("/v1/wizards/{wizard_id}/next", response_model=WizardView)
async def next_step(wizard: OrderWizard = Depends(get_wizard)):
    wizard.next_step()
    return wizard.snapshot()


@app.post("/v1/wizards/{wizard_id}/previous", response_model=WizardView)
async def previous_step(wizard: OrderWizard = Depends(get_wizard)):
    wizard.previous_step()
    return wizard.snapshot()


@app.get("/v1/wizards/{wizard_id}/price", response_model=PriceBreakdown)
async def get_price(wizard: OrderWizard = Depends(get_wizard)):
    return wizard.price()


@app.post("/v1/wizards/{wizard_id}/styles/reload", response_model=WizardView)
async def reload_styles(wizard: OrderWizard = Depends(get_wizard)):
    await wizard.reload_styles()
    return wizard.snapshot()


@app.post("/v1/wizards/{wizard_id}/preview", response_model=WizardView)
async def generate_preview(wizard: OrderWizard = Depends(get_wizard)):
    await wizard.generate_preview()
    return wizard.snapshot()


@app.post("/v1/wizards/{wizard_id}/submit", response_model=OrderResponse, status_code=201)
async def submit_order(
    wizard_id: str,
    session: SessionContext = Depends(get_session),
    wizard: OrderWizard = Depends(get_wizard),
):
    """
    Submits the order from the review step.

    On a store failure the wizard stays at step 5 with the draft intact and
    the response is 502 `ORDER_PERSIST_FAILED`; the client may retry.
    Once submitted, the wizard is released and later requests for it get 404.
    """
    order = await wizard.submit()
    session.wizards.pop(wizard_id, None)
    return OrderResponse(wizardId=wizard.wizard_id, order=order)


@app.delete("/v1/wizards/{wizard_id}", status_code=204)
async def abandon_wizard(
    wizard_id: str,
    session: SessionContext = Depends(get_session),
    wizard: OrderWizard = Depends(get_wizard),
):
    wizard.abandon()
    session.wizards.pop(wizard_id, None)


# Health Check Endpoint
@app.get("/health")
def health_check():
    """
    Simple health check endpoint for monitoring systems and container orchestrators.

    Returns:
        dict: A basic JSON object indicating service availability.
    """
    return {"status": "ok"}
