"""Pytest configuration and fixtures for the painting order service tests.

Collaborators (identity provider, record store, preview service) are faked at
the HTTP transport layer with `httpx.MockTransport`, so the real client code runs.
"""

import asyncio
import json
import os
import tempfile

# Keep the test log out of the working directory; read when main.py is imported.
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "painting_orders_test.log"))

import httpx
import pytest
import pytest_asyncio

from painting_service.catalog import StyleCatalog
from painting_service.clients import CatalogClient, IdentityClient, OrderStoreClient, PreviewClient
from painting_service.domain import Identity
from painting_service.preview import PreviewGenerator
from painting_service.workflow import OrderWizard

STYLES_PATH = "/rest/v1/painting_styles"
ORDERS_PATH = "/rest/v1/orders"
PREVIEW_PATH = "/functions/v1/generate-ai-preview"

STYLE_ROWS = [
    {"id": "style-impressionist", "name_fa": "امپرسیونیسم", "name_en": "Impressionist",
     "description": "Loose brushwork and vivid light.", "is_active": True},
    {"id": "style-realism", "name_fa": "رئالیسم", "name_en": "Realism",
     "description": "True-to-life detail.", "is_active": True},
    {"id": "style-cubism", "name_fa": "کوبیسم", "name_en": "Cubism",
     "description": "Not offered right now.", "is_active": False},
]


class FakeCollaborators:
    """In-memory stand-in for every external service, switchable into failure modes."""

    def __init__(self):
        self.style_rows = [dict(row) for row in STYLE_ROWS]
        self.catalog_status = 200
        self.preview_status = 200
        self.preview_body = {"imageUrl": "https://previews.test/generated/1.png"}
        self.store_status = 201
        self.signup_requires_confirmation = False
        self.accounts = {"ada@example.com": {"id": "user-ada", "password": "secret1", "full_name": "Ada"}}
        self.requests = []

        # Set preview_gate to hold preview responses until the test releases them
        self.preview_gate = None
        self.preview_started = asyncio.Event()
        self.store_gate = None
        self.store_started = asyncio.Event()

        self._order_counter = 0

    def calls(self, path: str) -> list:
        return [request for request in self.requests if request.url.path == path]

    def sent_json(self, path: str) -> list:
        return [json.loads(request.content) for request in self.calls(path)]

    def _session(self, email: str) -> dict:
        account = self.accounts[email]
        return {
            "access_token": f"token-{account['id']}",
            "user": {"id": account["id"], "email": email, "user_metadata": {"full_name": account["full_name"]}},
        }

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == STYLES_PATH:
            if self.catalog_status != 200:
                return httpx.Response(self.catalog_status, json={"message": "catalog down"})
            return httpx.Response(200, json=self.style_rows)

        if path == PREVIEW_PATH:
            self.preview_started.set()
            if self.preview_gate is not None:
                await self.preview_gate.wait()
            if self.preview_status != 200:
                return httpx.Response(self.preview_status, json={"error": "generation failed"})
            return httpx.Response(200, json=self.preview_body)

        if path == ORDERS_PATH:
            self.store_started.set()
            if self.store_gate is not None:
                await self.store_gate.wait()
            if self.store_status >= 400:
                return httpx.Response(self.store_status, json={"message": "store down"})
            self._order_counter += 1
            row = json.loads(request.content)
            row["id"] = f"order-{self._order_counter}"
            return httpx.Response(201, json=[row])

        if path == "/auth/v1/token":
            body = json.loads(request.content)
            account = self.accounts.get(body["email"])
            if account is None or account["password"] != body["password"]:
                return httpx.Response(400, json={"message": "Invalid login credentials"})
            return httpx.Response(200, json=self._session(body["email"]))

        if path == "/auth/v1/signup":
            body = json.loads(request.content)
            if body["email"] in self.accounts:
                return httpx.Response(422, json={"message": "User already registered"})
            self.accounts[body["email"]] = {
                "id": f"user-{len(self.accounts) + 1}",
                "password": body["password"],
                "full_name": body["data"]["full_name"],
            }
            if self.signup_requires_confirmation:
                return httpx.Response(200, json={"user": self._session(body["email"])["user"]})
            return httpx.Response(200, json=self._session(body["email"]))

        if path == "/auth/v1/logout":
            return httpx.Response(204)

        return httpx.Response(404, json={"message": f"no route {path}"})


@pytest.fixture
def collaborators() -> FakeCollaborators:
    return FakeCollaborators()


@pytest.fixture
def transport(collaborators) -> httpx.MockTransport:
    return httpx.MockTransport(collaborators.handle)


@pytest.fixture
def identity() -> Identity:
    return Identity(user_id="user-ada", email="ada@example.com", full_name="Ada")


@pytest_asyncio.fixture
async def identity_client(transport):
    client = IdentityClient(base_url="http://identity.test", transport=transport)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def catalog(transport):
    client = CatalogClient(base_url="http://store.test", transport=transport)
    yield StyleCatalog(client)
    await client.aclose()


@pytest_asyncio.fixture
async def preview_client(transport):
    client = PreviewClient(base_url="http://preview.test", transport=transport)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def order_client(transport):
    client = OrderStoreClient(base_url="http://store.test", transport=transport)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def wizard(identity, catalog, preview_client, order_client) -> OrderWizard:
    """A started wizard with the default catalog loaded."""
    wizard = OrderWizard(identity, catalog, PreviewGenerator(preview_client), order_client)
    await wizard.start()
    return wizard
