"""
This module provides communication clients for the external systems used by the painting order service:
- Identity Provider (REST API): sign-up, sign-in, sign-out
- Record Store (REST API): painting style catalog and order persistence
- Preview Service (REST API): AI preview image generation
Each class encapsulates its endpoint paths, headers, timeouts and connection management.
Errors are logged here and re-raised as httpx exceptions; the workflow decides what they mean.
"""

import logging
import os

import httpx

# Service addresses (defaults point at the mock services)
IDENTITY_SERVICE_URL = os.environ.get("IDENTITY_SERVICE_URL", "http://localhost:8101")
RECORD_STORE_URL = os.environ.get("RECORD_STORE_URL", "http://localhost:8102")
PREVIEW_SERVICE_URL = os.environ.get("PREVIEW_SERVICE_URL", "http://localhost:8103")
RECORD_STORE_API_KEY = os.environ.get("RECORD_STORE_API_KEY", "local-dev-key")

COLLABORATOR_TIMEOUT_SECONDS = float(os.environ.get("COLLABORATOR_TIMEOUT_SECONDS", "5.0"))
PREVIEW_TIMEOUT_SECONDS = float(os.environ.get("PREVIEW_TIMEOUT_SECONDS", "60.0"))

log = logging.getLogger(__name__)


class _ServiceClient:
    """
    Shared setup for the REST collaborators.
    Tests pass an `httpx.MockTransport` through `transport`.
    """
    def __init__(self, base_url: str, timeout: float, transport: httpx.AsyncBaseTransport = None, headers: dict = None):
        timeout_config = httpx.Timeout(timeout, connect=min(timeout, 5.0))
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_config,
            transport=transport,
            headers=headers or {},
        )

    async def aclose(self):
        """Closes the underlying HTTP connection pool."""
        await self.client.aclose()


# --- Identity Client (REST) ---
class IdentityClient(_ServiceClient):
    """
    Client for the identity provider.
    Issues and revokes access tokens for email/password credentials.
    """
    def __init__(self, base_url: str = IDENTITY_SERVICE_URL, transport: httpx.AsyncBaseTransport = None):
        super().__init__(base_url, COLLABORATOR_TIMEOUT_SECONDS, transport, {"apikey": RECORD_STORE_API_KEY})

    async def sign_up(self, full_name: str, email: str, password: str) -> dict:
        """
        Registers a new customer account.
        Returns:
            dict: Session payload with 'access_token' and 'user'.
        Raises:
            httpx.HTTPStatusError: If the provider rejects the registration.
            httpx.TransportError: If the provider cannot be reached.
        """
        payload = {"email": email, "password": password, "data": {"full_name": full_name}}
        try:
            response = await self.client.post("/auth/v1/signup", json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            log.warning(f"Sign-up for {email} rejected (HTTP {e.response.status_code}).")
            raise
        except httpx.TransportError as e:
            log.error(f"Identity provider unreachable during sign-up: {e}")
            raise

    async def sign_in(self, email: str, password: str) -> dict:
        """
        Exchanges email/password credentials for an access token.
        Returns:
            dict: Session payload with 'access_token' and 'user'.
        Raises:
            httpx.HTTPStatusError: If the credentials are rejected.
            httpx.TransportError: If the provider cannot be reached.
        """
        try:
            response = await self.client.post(
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            log.warning(f"Sign-in for {email} rejected (HTTP {e.response.status_code}).")
            raise
        except httpx.TransportError as e:
            log.error(f"Identity provider unreachable during sign-in: {e}")
            raise

    async def sign_out(self, access_token: str):
        """
        Revokes the access token at the provider.
        Raises:
            httpx.HTTPError: If the revocation call fails.
        """
        try:
            response = await self.client.post("/auth/v1/logout", headers={"Authorization": f"Bearer {access_token}"})
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.warning(f"Sign-out call to identity provider failed: {e}")
            raise


# --- Record Store Clients (REST) ---
class CatalogClient(_ServiceClient):
    """
    Read-only client for the painting style catalog table.
    """
    def __init__(self, base_url: str = RECORD_STORE_URL, transport: httpx.AsyncBaseTransport = None):
        super().__init__(base_url, COLLABORATOR_TIMEOUT_SECONDS, transport, {"apikey": RECORD_STORE_API_KEY})

    async def fetch_active_styles(self) -> list:
        """
        Queries the active painting styles in catalog order.
        Returns:
            list: Raw style rows (dicts); validated by the caller.
        Raises:
            httpx.HTTPError: If the query fails or times out.
        """
        try:
            response = await self.client.get(
                "/rest/v1/painting_styles",
                params={"select": "*", "is_active": "eq.true"},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            log.error(f"Painting style query failed: {e}")
            raise


class OrderStoreClient(_ServiceClient):
    """
    Client for the orders table. Inserts exactly one row per call.
    """
    def __init__(self, base_url: str = RECORD_STORE_URL, transport: httpx.AsyncBaseTransport = None):
        super().__init__(base_url, COLLABORATOR_TIMEOUT_SECONDS, transport, {"apikey": RECORD_STORE_API_KEY})

    async def insert_order(self, row: dict) -> dict:
        """
        Inserts a single order row and returns it as stored (including its generated id).
        Args:
            row (dict): Column values of the order, without id.
        Returns:
            dict: The inserted row.
        Raises:
            httpx.HTTPError: If the insert fails or times out.
        """
        try:
            response = await self.client.post(
                "/rest/v1/orders",
                json=row,
                headers={"Prefer": "return=representation"},
            )
            response.raise_for_status()
            body = response.json()
            # The store answers with a list of inserted rows
            return body[0] if isinstance(body, list) else body
        except httpx.HTTPError as e:
            log.error(f"Order insert for user {row.get('user_id')} failed: {e}")
            raise


# --- Preview Client (REST) ---
class PreviewClient(_ServiceClient):
    """
    Client for the AI preview generation function.
    Generation is slow, so this client uses a longer read timeout.
    """
    def __init__(self, base_url: str = PREVIEW_SERVICE_URL, transport: httpx.AsyncBaseTransport = None):
        super().__init__(base_url, PREVIEW_TIMEOUT_SECONDS, transport, {"apikey": RECORD_STORE_API_KEY})

    async def generate(self, prompt: str) -> dict:
        """
        Requests one preview image for the given prompt.
        Returns:
            dict: Response body, expected to contain 'imageUrl'.
        Raises:
            httpx.HTTPError: If the service fails, rejects the prompt or times out.
        """
        try:
            response = await self.client.post("/functions/v1/generate-ai-preview", json={"prompt": prompt})
            response.raise_for_status()
            return response.json()
        except httpx.ReadTimeout:
            log.error("Preview service timeout (ReadTimeout).")
            raise
        except httpx.HTTPError as e:
            log.error(f"Preview generation call failed: {e}")
            raise
