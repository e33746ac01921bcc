"""
session.py — Session Context and Gate

The identity of the customer is never looked up ambiently. A `SessionContext`
is created when a customer signs in, passed explicitly to the `SessionGate`
and to every wizard opened through it, and torn down at sign-out.

Components:
    - SessionContext: holds the identity and access token of one signed-in customer.
    - SessionGate: refuses entry without an identity and opens order wizards.
    - WizardRegistry: in-memory sessions of the HTTP API.
"""

import logging
import uuid
from typing import Dict, Optional

import httpx
import pydantic

from .catalog import StyleCatalog
from .clients import CatalogClient, IdentityClient, OrderStoreClient, PreviewClient
from .domain import Identity
from .errors import (
    AuthenticationFailed,
    IdentityUnavailable,
    InvalidInput,
    Unauthenticated,
    WizardNotFound,
)
from .models import SignInRequest, SignUpRequest
from .preview import PreviewGenerator
from .workflow import OrderWizard

log = logging.getLogger(__name__)

# Provider answers that mean "bad credentials" rather than "provider down"
REJECTION_STATUS_CODES = {400, 401, 403, 422}


def _describe_errors(error: pydantic.ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in error.errors()
    )


def _provider_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    return str(body.get("message") or body.get("msg") or body.get("error_description") or "")


def _sign_up_rejection(response: httpx.Response) -> str:
    message = _provider_message(response)
    if "already registered" in message.lower() or (response.status_code == 422 and not message):
        return "This email address is already registered."
    if message:
        return f"Sign-up was rejected: {message}"
    return "Sign-up was rejected by the identity provider."


def _identity_from_session(payload) -> tuple:
    """
    Extracts (access_token, Identity) from a provider session payload.
    Raises:
        IdentityUnavailable: If the payload does not have the expected shape.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("user"), dict):
        raise IdentityUnavailable("Identity provider returned an unexpected session payload.")
    user = payload["user"]
    metadata = user.get("user_metadata") or {}
    try:
        identity = Identity(
            user_id=str(user.get("id") or ""),
            email=user.get("email") or "",
            full_name=metadata.get("full_name"),
        )
    except pydantic.ValidationError as e:
        raise IdentityUnavailable(f"Identity provider returned an invalid user: {_describe_errors(e)}")
    return payload.get("access_token"), identity


class SessionContext:
    """
    Explicit session of one customer.

    Created signed-out; `sign_in()` or `sign_up()` establish the identity and
    `sign_out()` tears it down, abandoning any wizard still open.
    """
    def __init__(self, identity_client: IdentityClient):
        self.session_id = str(uuid.uuid4())
        self.identity_client = identity_client
        self.wizards: Dict[str, OrderWizard] = {}
        self._identity: Optional[Identity] = None
        self._access_token: Optional[str] = None

    def current_user(self) -> Optional[Identity]:
        return self._identity

    async def sign_up(self, full_name: str, email: str, password: str) -> Identity:
        """
        Registers a new customer and signs them in.
        Raises:
            InvalidInput: If name, email or password are malformed (no call is made).
            AuthenticationFailed: If the provider rejects the registration or
                requires email confirmation first.
            IdentityUnavailable: If the provider cannot be reached.
        """
        try:
            request = SignUpRequest(fullName=full_name, email=email, password=password)
        except pydantic.ValidationError as e:
            raise InvalidInput(f"Invalid sign-up details: {_describe_errors(e)}")

        payload = await self._call_provider(
            self.identity_client.sign_up(request.fullName, request.email, request.password),
            describe_rejection=_sign_up_rejection,
        )
        access_token, identity = _identity_from_session(payload)
        if not access_token:
            raise AuthenticationFailed("Account created. Please confirm your email address, then sign in.")
        return self._establish(access_token, identity)

    async def sign_in(self, email: str, password: str) -> Identity:
        """
        Signs a customer in with email and password.
        Raises:
            InvalidInput: If email or password are malformed (no call is made).
            AuthenticationFailed: If the credentials are rejected.
            IdentityUnavailable: If the provider cannot be reached.
        """
        try:
            request = SignInRequest(email=email, password=password)
        except pydantic.ValidationError as e:
            raise InvalidInput(f"Invalid sign-in details: {_describe_errors(e)}")

        payload = await self._call_provider(self.identity_client.sign_in(request.email, request.password))
        access_token, identity = _identity_from_session(payload)
        if not access_token:
            raise IdentityUnavailable("Identity provider returned no access token.")
        return self._establish(access_token, identity)

    async def sign_out(self):
        """Abandons open wizards, clears the identity and revokes the token."""
        for wizard in self.wizards.values():
            wizard.abandon()
        self.wizards.clear()

        access_token = self._access_token
        identity = self._identity
        self._identity = None
        self._access_token = None

        if access_token:
            try:
                await self.identity_client.sign_out(access_token)
            except httpx.HTTPError:
                # The local session is gone either way; the token expires on its own.
                log.warning(f"[Session: {self.session_id}] Provider sign-out failed for {identity.email}.")
        if identity:
            log.info(f"[Session: {self.session_id}] {identity.email} signed out.")

    def _establish(self, access_token: str, identity: Identity) -> Identity:
        self._access_token = access_token
        self._identity = identity
        log.info(f"[Session: {self.session_id}] {identity.email} signed in (user {identity.user_id}).")
        return identity

    @staticmethod
    async def _call_provider(call, describe_rejection=None):
        try:
            return await call
        except httpx.HTTPStatusError as e:
            if e.response.status_code in REJECTION_STATUS_CODES:
                if describe_rejection is not None:
                    raise AuthenticationFailed(describe_rejection(e.response))
                raise AuthenticationFailed("Email or password is incorrect.")
            raise IdentityUnavailable(f"Identity provider error (HTTP {e.response.status_code}).")
        except (httpx.HTTPError, ValueError) as e:
            raise IdentityUnavailable(f"Identity provider unreachable: {e}")


class SessionGate:
    """
    Entry gate of the order workflow.
    Only a session with an identity may open a wizard.
    """
    def __init__(self, catalog: StyleCatalog, preview_client: PreviewClient, order_client: OrderStoreClient):
        self.catalog = catalog
        self.preview_client = preview_client
        self.order_client = order_client

    @staticmethod
    def require_identity(context: Optional[SessionContext]) -> Identity:
        identity = context.current_user() if context is not None else None
        if identity is None:
            raise Unauthenticated()
        return identity

    async def open_wizard(self, context: SessionContext) -> OrderWizard:
        """
        Opens a new order wizard for the signed-in customer and loads the styles.
        Raises:
            Unauthenticated: If the session has no identity.
        """
        identity = self.require_identity(context)
        wizard = OrderWizard(identity, self.catalog, PreviewGenerator(self.preview_client), self.order_client)
        context.wizards[wizard.wizard_id] = wizard
        log.info(f"{wizard.log_prefix} Opened for user {identity.user_id}.")
        await wizard.start()
        return wizard


class WizardRegistry:
    """
    In-memory sessions of the HTTP API, keyed by session id.
    Owns the collaborator clients and closes them on shutdown.
    """
    def __init__(
        self,
        identity_client: IdentityClient,
        catalog_client: CatalogClient,
        preview_client: PreviewClient,
        order_client: OrderStoreClient,
    ):
        self.identity_client = identity_client
        self._clients = [identity_client, catalog_client, preview_client, order_client]
        self.gate = SessionGate(StyleCatalog(catalog_client), preview_client, order_client)
        self.sessions: Dict[str, SessionContext] = {}

    @classmethod
    def from_environment(cls, transport: httpx.AsyncBaseTransport = None) -> "WizardRegistry":
        return cls(
            IdentityClient(transport=transport),
            CatalogClient(transport=transport),
            PreviewClient(transport=transport),
            OrderStoreClient(transport=transport),
        )

    async def sign_in(self, email: str, password: str) -> SessionContext:
        context = SessionContext(self.identity_client)
        await context.sign_in(email, password)
        self.sessions[context.session_id] = context
        return context

    async def sign_up(self, full_name: str, email: str, password: str) -> SessionContext:
        context = SessionContext(self.identity_client)
        await context.sign_up(full_name, email, password)
        self.sessions[context.session_id] = context
        return context

    async def sign_out(self, session_id: str):
        context = self.sessions.pop(session_id, None)
        if context is None:
            raise Unauthenticated()
        await context.sign_out()

    def get_session(self, session_id: Optional[str]) -> SessionContext:
        context = self.sessions.get(session_id) if session_id else None
        if context is None:
            raise Unauthenticated()
        return context

    def get_wizard(self, context: SessionContext, wizard_id: str) -> OrderWizard:
        wizard = context.wizards.get(wizard_id)
        if wizard is None:
            raise WizardNotFound(f"Order wizard not found: {wizard_id}")
        return wizard

    async def aclose(self):
        for context in list(self.sessions.values()):
            for wizard in context.wizards.values():
                wizard.abandon()
        self.sessions.clear()
        for client in self._clients:
            await client.aclose()
