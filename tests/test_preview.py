"""Preview prompt composition and single-flight generation tests."""

import asyncio

import pytest

from painting_service.domain import PaintingStyle
from painting_service.errors import EmptyPrompt, GenerationFailed, PreviewInProgress
from painting_service.preview import PreviewGenerator, compose_prompt, resolve_prompt_text

from conftest import PREVIEW_PATH

IMPRESSIONIST = PaintingStyle(
    id="style-impressionist",
    name_fa="امپرسیونیسم",
    name_en="Impressionist",
    description="",
    is_active=True,
)


class TestPromptText:

    def test_ai_prompt_wins_over_notes(self):
        assert resolve_prompt_text("a lighthouse at dusk", "my grandmother") == "a lighthouse at dusk"

    def test_falls_back_to_customer_notes(self):
        assert resolve_prompt_text("", "portrait in traditional dress") == "portrait in traditional dress"

    def test_whitespace_prompt_falls_back_to_notes(self):
        assert resolve_prompt_text("   ", " garden ") == "garden"

    def test_both_empty_raises(self):
        with pytest.raises(EmptyPrompt):
            resolve_prompt_text("", "  ")

    def test_style_name_is_added(self):
        prompt = compose_prompt("portrait in traditional dress", IMPRESSIONIST)
        assert prompt == "portrait in traditional dress, Impressionist painting style, high quality, detailed artwork"

    def test_style_qualifier_omitted_without_style(self):
        prompt = compose_prompt("portrait in traditional dress")
        assert prompt == "portrait in traditional dress, high quality, detailed artwork"
        assert "painting style" not in prompt


@pytest.mark.asyncio
class TestPreviewGenerator:

    async def test_sends_composed_prompt_and_returns_image(self, preview_client, collaborators):
        generator = PreviewGenerator(preview_client)

        image = await generator.generate("a cat", IMPRESSIONIST)

        assert image == "https://previews.test/generated/1.png"
        assert collaborators.sent_json(PREVIEW_PATH) == [
            {"prompt": "a cat, Impressionist painting style, high quality, detailed artwork"}
        ]

    async def test_empty_prompt_never_reaches_service(self, preview_client, collaborators):
        generator = PreviewGenerator(preview_client)

        with pytest.raises(EmptyPrompt):
            await generator.generate("  ")
        assert collaborators.calls(PREVIEW_PATH) == []

    async def test_second_call_rejected_while_pending(self, preview_client, collaborators):
        generator = PreviewGenerator(preview_client)
        collaborators.preview_gate = asyncio.Event()

        first = asyncio.create_task(generator.generate("a cat"))
        await collaborators.preview_started.wait()
        assert generator.is_pending

        with pytest.raises(PreviewInProgress):
            await generator.generate("a dog")

        collaborators.preview_gate.set()
        assert await first == "https://previews.test/generated/1.png"
        assert not generator.is_pending
        assert len(collaborators.calls(PREVIEW_PATH)) == 1

    async def test_new_call_allowed_after_failure(self, preview_client, collaborators):
        generator = PreviewGenerator(preview_client)
        collaborators.preview_status = 500

        with pytest.raises(GenerationFailed):
            await generator.generate("a cat")
        assert not generator.is_pending

        collaborators.preview_status = 200
        assert await generator.generate("a cat") == "https://previews.test/generated/1.png"

    async def test_missing_image_url_is_failure(self, preview_client, collaborators):
        generator = PreviewGenerator(preview_client)
        collaborators.preview_body = {"imageUrl": ""}

        with pytest.raises(GenerationFailed):
            await generator.generate("a cat")
