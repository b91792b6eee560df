"""Generation pipeline: inputs -> document -> slot images -> final artifact.

Progress follows fixed checkpoints; the two provider round trips dominate
the runtime and cannot be observed at a finer grain.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

from coinforge.errors.exceptions import ProviderError, ValidationError
from coinforge.models.job import UserInputs
from coinforge.repositories.generated_file_repo import GeneratedFileRepository
from coinforge.services.generation.provider import GenerationProvider
from coinforge.services.generation.templates import ImageSlot, SiteTemplate
from coinforge.services.job_tracker import JobTracker
from coinforge.workers.base import BaseWorker

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Checkpoints
VALIDATED = 10
DOCUMENT_REQUESTED = 20
DOCUMENT_READY = 40
SLOTS_START = 50
SLOTS_END = 60
SLOTS_SUBSTITUTED = 80
FINALIZED = 90

# 5x5 PNG used whenever a slot image cannot be produced.
PLACEHOLDER_IMAGE_URI = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAUAAAAFCAYAAACNbyblAAAAHElEQVQI"
    "W2Nk+M+ACzFEFwoKMvClX6BAsAwAGgGFu6+opmQAAAABJRU5ErkJggg=="
)
STRIPPED_IMAGE_MARKER = "data:image/png;base64,INLINE_IMAGE_REMOVED"

_FENCE_RE = re.compile(r"`{3,}[\w+-]*")
_INLINE_IMAGE_RE = re.compile(r"data:image/[\w.+-]+;base64,[A-Za-z0-9+/=]+")


@dataclass(frozen=True)
class GenerationRequest:
    account_id: str
    wallet_address: str
    inputs: UserInputs


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fence markers (with any language tag) from *text*."""
    return _FENCE_RE.sub("", text).strip()


def substitute_slots(document: str, replacements: dict[str, str]) -> str:
    """Replace every occurrence of each slot token with its value."""
    # Longest token first so a token that prefixes another cannot clobber it
    for token in sorted(replacements, key=len, reverse=True):
        document = document.replace(token, replacements[token])
    return document


def strip_inline_images(document: str) -> str:
    return _INLINE_IMAGE_RE.sub(STRIPPED_IMAGE_MARKER, document)


def slot_checkpoint(index: int, total: int) -> int:
    """Progress value reported before rendering slot *index* of *total*."""
    if total <= 1:
        return SLOTS_START
    step = (SLOTS_END - SLOTS_START) // (total - 1)
    return min(SLOTS_START + index * step, SLOTS_END) if step else SLOTS_START


class GenerationPipeline(BaseWorker):
    """Drives one job from validated inputs to a stored artifact."""

    def __init__(
        self,
        tracker: JobTracker,
        provider: GenerationProvider,
        template: SiteTemplate,
        session_factory=None,
        call_timeout: float = 120.0,
        strip_history_images: bool = True,
    ):
        super().__init__(tracker)
        self.provider = provider
        self.template = template
        self.session_factory = session_factory
        self.call_timeout = call_timeout
        self.strip_history_images = strip_history_images

    async def process(self, job_id: str, payload: GenerationRequest) -> str:
        inputs = payload.inputs
        missing = inputs.missing_fields()
        if missing:
            raise ValidationError(f"Missing required inputs: {', '.join(missing)}")
        self.tracker.set_progress(job_id, VALIDATED)

        system_prompt = self.template.render_system_prompt(inputs)
        self.tracker.set_progress(job_id, DOCUMENT_REQUESTED)

        raw_document = await self._bounded(
            self.provider.generate_document(system_prompt, self.template.user_prompt),
            "document",
        )
        document = strip_code_fences(raw_document)
        if not document:
            raise ProviderError("Text generation returned an empty document")
        self.tracker.set_progress(job_id, DOCUMENT_READY)

        slot_prompts = [(slot, slot.render_prompt(inputs)) for slot in self.template.slots]
        replacements: dict[str, str] = {}
        for index, (slot, prompt) in enumerate(slot_prompts):
            self.tracker.set_progress(job_id, slot_checkpoint(index, len(slot_prompts)))
            replacements[slot.token] = await self._render_slot(job_id, slot, prompt)

        self.tracker.set_progress(job_id, SLOTS_SUBSTITUTED)
        document = substitute_slots(document, replacements)

        self.tracker.set_progress(job_id, FINALIZED)
        return document

    async def on_complete(self, job_id: str, payload: GenerationRequest, artifact: str) -> None:
        if self.session_factory is None:
            return
        content = strip_inline_images(artifact) if self.strip_history_images else artifact
        async with self.session_factory() as session:
            await GeneratedFileRepository(session).append(payload.account_id, job_id, content)
            await session.commit()
        logger.info("Stored generated file for job %s (%d chars)", job_id, len(content))

    async def _render_slot(self, job_id: str, slot: ImageSlot, prompt: str) -> str:
        try:
            image = await self._bounded(self.provider.generate_image(prompt, slot.size), slot.token)
        except Exception as exc:
            logger.warning(
                "Image slot %s failed for job %s, using placeholder: %s", slot.token, job_id, exc
            )
            return PLACEHOLDER_IMAGE_URI
        return image.to_data_uri()

    async def _bounded(self, call: Awaitable[T], label: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.call_timeout)
        except TimeoutError as exc:
            raise ProviderError(
                f"Provider call '{label}' timed out after {self.call_timeout:g}s"
            ) from exc
