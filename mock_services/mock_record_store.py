"""
mock_record_store.py — Mock Implementation of the Record Store (REST API)

This module simulates the hosted database that serves the painting style catalog
and stores submitted orders. It exposes a tiny subset of a PostgREST-style API.

Simulation Scenarios:
    • Active and inactive painting styles (only active ones match is_active=eq.true)
    • Successful order insert with a generated id
    • Failed order insert (customer_notes containing "#fail-store" → HTTP 503)

Endpoints:
    GET  /rest/v1/painting_styles — Lists styles, optionally filtered by is_active.
    POST /rest/v1/orders          — Inserts one order row.

Port:
    Default: 8102 (HTTP)
"""

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional
import logging
import time
import uuid

app = FastAPI(title="Mock Record Store")
logging.basicConfig(level=logging.INFO)

PAINTING_STYLES = [
    {"id": "style-impressionist", "name_fa": "امپرسیونیسم", "name_en": "Impressionist",
     "description": "Loose brushwork and vivid light.", "is_active": True},
    {"id": "style-realism", "name_fa": "رئالیسم", "name_en": "Realism",
     "description": "True-to-life detail.", "is_active": True},
    {"id": "style-miniature", "name_fa": "مینیاتور", "name_en": "Persian Miniature",
     "description": "Fine detail in the Persian miniature tradition.", "is_active": True},
    {"id": "style-cubism", "name_fa": "کوبیسم", "name_en": "Cubism",
     "description": "Geometric forms, currently unavailable.", "is_active": False},
]

orders = []


class OrderRow(BaseModel):
    """Order columns as sent by the painting order service."""
    user_id: str
    style_id: str
    canvas_size: str
    material: str
    ai_prompt: str = ""
    customer_notes: str = ""
    ai_preview_url: Optional[str] = None
    reference_image_url: Optional[str] = None
    base_price: int
    rush_fee: int
    total_price: int
    is_rush: bool
    status: str


@app.get("/rest/v1/painting_styles")
def list_styles(is_active: Optional[str] = None, select: str = "*"):
    """
    Returns the painting styles in catalog order.
    Supports the `is_active=eq.true|false` filter.
    """
    if is_active is None:
        return PAINTING_STYLES
    wanted = is_active == "eq.true"
    return [style for style in PAINTING_STYLES if style["is_active"] == wanted]


@app.post("/rest/v1/orders", status_code=201)
def insert_order(row: OrderRow):
    """
    Inserts one order and returns it (as a one-element list) with its generated id.

    Raises:
        HTTPException(503): If the notes request a simulated store failure.
    """
    if "#fail-store" in row.customer_notes:
        logging.warning(f"[STORE] Simulated insert failure for user {row.user_id}.")
        raise HTTPException(status_code=503, detail={"message": "Database temporarily unavailable."})

    stored = row.model_dump()
    stored["id"] = str(uuid.uuid4())
    stored["created_at"] = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    orders.append(stored)
    logging.info(f"[STORE] Order {stored['id']} stored (total {row.total_price}).")
    return [stored]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8102)
