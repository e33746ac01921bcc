"""
mock_preview_service.py — Mock Implementation of the AI Preview Service (REST API)

This module simulates the image generation function used for order previews.
It does not generate images; it answers with a placeholder URL after a short delay.

Simulation Scenarios:
    • Successful generation (placeholder image URL)
    • Generation failure (prompt containing "#fail" → HTTP 500)
    • Slow generation (prompt containing "#slow" → 10 s delay)

Endpoints:
    POST /functions/v1/generate-ai-preview — Generates one preview image.

Port:
    Default: 8103 (HTTP)
"""

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
import asyncio
import logging
import uuid

app = FastAPI(title="Mock Preview Service")
logging.basicConfig(level=logging.INFO)


class PreviewRequest(BaseModel):
    prompt: str = Field(..., min_length=1)


@app.post("/functions/v1/generate-ai-preview")
async def generate_preview(request: PreviewRequest):
    """
    Generates a preview for the given prompt.

    Returns:
        dict: {"imageUrl": str}
    Raises:
        HTTPException(500): If the prompt requests a simulated failure.
    """
    logging.info(f"[PREVIEW] Prompt received: {request.prompt!r}")

    if "#fail" in request.prompt:
        logging.warning("[PREVIEW] Simulated generation failure.")
        raise HTTPException(status_code=500, detail={"error": "Image generation failed."})

    await asyncio.sleep(10 if "#slow" in request.prompt else 1)
    image_id = uuid.uuid4().hex
    return {"imageUrl": f"https://previews.example.com/generated/{image_id}.png"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8103)
