"""
preview.py — AI Preview Generation

Turns the customer's description into a preview image through the external
preview service. Only one request may be outstanding per generator, which
keeps duplicate images (and their cost) from piling up when the customer
clicks twice.
"""

import logging
from typing import Optional

import httpx

from .clients import PreviewClient
from .domain import PaintingStyle
from .errors import EmptyPrompt, GenerationFailed, PreviewInProgress

log = logging.getLogger(__name__)

QUALITY_SUFFIX = "high quality, detailed artwork"


def resolve_prompt_text(ai_prompt: str, customer_notes: str) -> str:
    """
    Picks the text to generate from: the AI prompt wins over the customer notes.
    Raises:
        EmptyPrompt: If both are empty or whitespace.
    """
    for text in (ai_prompt, customer_notes):
        if text and text.strip():
            return text.strip()
    raise EmptyPrompt()


def compose_prompt(prompt_text: str, style: Optional[PaintingStyle] = None) -> str:
    """
    Builds the prompt sent to the generator.

    Example:
        >>> compose_prompt("portrait in traditional dress")
        'portrait in traditional dress, high quality, detailed artwork'
    """
    parts = [prompt_text]
    if style is not None:
        parts.append(f"{style.english_name} painting style")
    parts.append(QUALITY_SUFFIX)
    return ", ".join(parts)


class PreviewGenerator:
    """
    Single-flight wrapper around the preview service.
    Create one per wizard; the HTTP client may be shared.
    """
    def __init__(self, client: PreviewClient):
        self.client = client
        self._pending = False

    @property
    def is_pending(self) -> bool:
        return self._pending

    async def generate(self, prompt_text: str, style: Optional[PaintingStyle] = None) -> str:
        """
        Generates one preview image.
        Args:
            prompt_text (str): Resolved description (see `resolve_prompt_text`).
            style (PaintingStyle): Selected style, if any.
        Returns:
            str: Reference (URL) of the generated image.
        Raises:
            EmptyPrompt: If prompt_text is empty.
            PreviewInProgress: If a generation is already outstanding.
            GenerationFailed: If the service fails or returns no image.
        """
        if not prompt_text or not prompt_text.strip():
            raise EmptyPrompt()
        if self._pending:
            raise PreviewInProgress()

        self._pending = True
        try:
            prompt = compose_prompt(prompt_text.strip(), style)
            try:
                body = await self.client.generate(prompt)
            except (httpx.HTTPError, ValueError) as e:
                raise GenerationFailed(f"Preview generation failed: {e}")

            image_url = body.get("imageUrl") if isinstance(body, dict) else None
            if not isinstance(image_url, str) or not image_url:
                raise GenerationFailed("Preview service returned no image.")
            return image_url
        finally:
            self._pending = False
