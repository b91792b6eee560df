"""Tests for the generation pipeline worker."""

import base64

import pytest

from coinforge.errors.exceptions import ProviderError
from coinforge.models.enums import JobStatus
from coinforge.models.job import UserInputs
from coinforge.repositories.generated_file_repo import GeneratedFileRepository
from coinforge.services.generation.templates import (
    BACKGROUND_TOKEN,
    CLASSIC_TEMPLATE,
    LANDING_TEMPLATE,
    LOGO_TOKEN,
)
from coinforge.services.job_tracker import JobTracker
from coinforge.workers.generation_pipeline import (
    PLACEHOLDER_IMAGE_URI,
    STRIPPED_IMAGE_MARKER,
    GenerationPipeline,
    GenerationRequest,
    strip_code_fences,
    strip_inline_images,
    substitute_slots,
)

from conftest import FAKE_PNG, FakeGenerationProvider

FAKE_PNG_URI = "data:image/png;base64," + base64.b64encode(FAKE_PNG).decode()


class RecordingTracker(JobTracker):
    """Tracker that remembers every percent a poller could have observed."""

    def __init__(self):
        super().__init__()
        self.observed: list[int] = []

    def set_progress(self, job_id: str, percent: int) -> None:
        super().set_progress(job_id, percent)
        self.observed.append(self.get(job_id).percent)


def _request(account_id="acct_x", **inputs) -> GenerationRequest:
    values = {"coinName": "Doge Rocket", "colorPalette": "orange and black"}
    values.update(inputs)
    return GenerationRequest(
        account_id=account_id,
        wallet_address="kaspa:qtestaccount",
        inputs=UserInputs.model_validate(values),
    )


def _pipeline(tracker, provider, **kwargs) -> GenerationPipeline:
    return GenerationPipeline(tracker, provider, LANDING_TEMPLATE, **kwargs)


class TestHelpers:
    def test_strip_code_fences_removes_language_tags(self):
        assert strip_code_fences("```html\n<html></html>\n```") == "<html></html>"
        assert strip_code_fences("````\nbody\n````") == "body"

    def test_strip_code_fences_leaves_plain_text(self):
        assert strip_code_fences("  <p>hi</p>  ") == "<p>hi</p>"

    def test_substitute_slots_replaces_every_occurrence(self):
        doc = "A IMAGE_PLACEHOLDER_LOGO B IMAGE_PLACEHOLDER_LOGO C IMAGE_PLACEHOLDER_BG"
        out = substitute_slots(doc, {LOGO_TOKEN: "L", BACKGROUND_TOKEN: "G"})
        assert out == "A L B L C G"

    def test_substitute_slots_prefers_longer_token(self):
        out = substitute_slots("X SLOT_A_WIDE Y SLOT_A", {"SLOT_A": "1", "SLOT_A_WIDE": "2"})
        assert out == "X 2 Y 1"

    def test_strip_inline_images(self):
        doc = f'<img src="{FAKE_PNG_URI}"><div style="background:url({PLACEHOLDER_IMAGE_URI})">'
        stripped = strip_inline_images(doc)
        assert FAKE_PNG_URI not in stripped
        assert stripped.count(STRIPPED_IMAGE_MARKER) == 2


class TestPipelineRun:
    @pytest.mark.asyncio
    async def test_successful_run_reaches_done(self, fake_provider):
        tracker = RecordingTracker()
        job_id = tracker.create()

        status = await _pipeline(tracker, fake_provider).execute(job_id, _request())

        assert status == JobStatus.DONE
        job = tracker.get(job_id)
        assert job.status == JobStatus.DONE
        assert job.percent == 100
        assert "```" not in job.artifact
        assert job.artifact.startswith("<!DOCTYPE html>")
        assert job.artifact.count(FAKE_PNG_URI) == 3
        assert len(fake_provider.document_calls) == 1
        assert len(fake_provider.image_calls) == 2

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_and_ends_at_100(self, fake_provider):
        tracker = RecordingTracker()
        job_id = tracker.create()
        await _pipeline(tracker, fake_provider).execute(job_id, _request())

        observed = tracker.observed + [tracker.get(job_id).percent]
        assert observed == sorted(observed)
        assert observed == [10, 20, 40, 50, 60, 80, 90, 100]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("template", [LANDING_TEMPLATE, CLASSIC_TEMPLATE])
    async def test_no_slot_tokens_survive(self, template, fake_provider):
        tracker = JobTracker()
        job_id = tracker.create()
        await GenerationPipeline(tracker, fake_provider, template).execute(job_id, _request())

        artifact = tracker.get(job_id).artifact
        for token in template.tokens:
            assert token not in artifact

    @pytest.mark.asyncio
    async def test_prompts_carry_inputs_and_default_description(self, fake_provider):
        tracker = JobTracker()
        job_id = tracker.create()
        await _pipeline(tracker, fake_provider).execute(job_id, _request())

        system_prompt, user_prompt = fake_provider.document_calls[0]
        assert "Doge Rocket" in system_prompt
        assert "orange and black" in system_prompt
        assert "memecoin style" in system_prompt
        assert user_prompt == LANDING_TEMPLATE.user_prompt
        assert [size for _, size in fake_provider.image_calls] == ["256x256", "256x256"]
        assert all("Doge Rocket" in prompt for prompt, _ in fake_provider.image_calls)

    @pytest.mark.asyncio
    async def test_project_desc_alias_reaches_prompts(self, fake_provider):
        tracker = JobTracker()
        job_id = tracker.create()
        await _pipeline(tracker, fake_provider).execute(job_id, _request(projectDesc="space dogs"))

        system_prompt, _ = fake_provider.document_calls[0]
        assert "space dogs" in system_prompt


class TestPipelineFailures:
    @pytest.mark.asyncio
    async def test_image_failure_falls_back_to_placeholder(self):
        provider = FakeGenerationProvider(image_error=ProviderError("image endpoint down"))
        tracker = JobTracker()
        job_id = tracker.create()

        status = await _pipeline(tracker, provider).execute(job_id, _request())

        assert status == JobStatus.DONE
        artifact = tracker.get(job_id).artifact
        assert artifact.count(PLACEHOLDER_IMAGE_URI) == 3
        assert LOGO_TOKEN not in artifact
        assert BACKGROUND_TOKEN not in artifact

    @pytest.mark.asyncio
    async def test_text_failure_fails_job(self):
        provider = FakeGenerationProvider(text_error=ProviderError("quota exceeded"))
        tracker = JobTracker()
        job_id = tracker.create()

        status = await _pipeline(tracker, provider).execute(job_id, _request())

        assert status == JobStatus.FAILED
        job = tracker.get(job_id)
        assert job.status == JobStatus.FAILED
        assert job.percent == 100
        assert job.artifact is None
        assert "quota exceeded" in job.error
        assert provider.image_calls == []

    @pytest.mark.asyncio
    async def test_empty_document_fails_job(self):
        provider = FakeGenerationProvider(document="```html\n```")
        tracker = JobTracker()
        job_id = tracker.create()

        assert await _pipeline(tracker, provider).execute(job_id, _request()) == JobStatus.FAILED

    @pytest.mark.asyncio
    async def test_provider_timeout_fails_job(self):
        provider = FakeGenerationProvider(delay=1.0)
        tracker = JobTracker()
        job_id = tracker.create()

        status = await _pipeline(tracker, provider, call_timeout=0.05).execute(job_id, _request())

        assert status == JobStatus.FAILED
        assert "timed out" in tracker.get(job_id).error

    @pytest.mark.asyncio
    async def test_missing_inputs_fail_job(self, fake_provider):
        tracker = JobTracker()
        job_id = tracker.create()

        status = await _pipeline(tracker, fake_provider).execute(job_id, _request(colorPalette="  "))

        assert status == JobStatus.FAILED
        assert "colorPalette" in tracker.get(job_id).error
        assert fake_provider.document_calls == []


class TestHistoryPersistence:
    @pytest.mark.asyncio
    async def test_history_appended_with_images_stripped(self, session_factory, make_account, fake_provider):
        account = await make_account(credits="0")
        tracker = JobTracker()
        job_id = tracker.create(account.account_id)
        pipeline = _pipeline(tracker, fake_provider, session_factory=session_factory)

        await pipeline.execute(job_id, _request(account_id=account.account_id))

        async with session_factory() as session:
            files = await GeneratedFileRepository(session).list_for_account(account.account_id)
        assert len(files) == 1
        assert files[0].job_id == job_id
        assert FAKE_PNG_URI not in files[0].content
        assert STRIPPED_IMAGE_MARKER in files[0].content
        # The tracker keeps the full artifact
        assert FAKE_PNG_URI in tracker.get(job_id).artifact

    @pytest.mark.asyncio
    async def test_history_keeps_images_when_configured(self, session_factory, make_account, fake_provider):
        account = await make_account()
        tracker = JobTracker()
        job_id = tracker.create(account.account_id)
        pipeline = _pipeline(
            tracker, fake_provider, session_factory=session_factory, strip_history_images=False
        )

        await pipeline.execute(job_id, _request(account_id=account.account_id))

        async with session_factory() as session:
            files = await GeneratedFileRepository(session).list_for_account(account.account_id)
        assert files[0].content == tracker.get(job_id).artifact

    @pytest.mark.asyncio
    async def test_persistence_failure_keeps_job_done(self, fake_provider):
        def broken_session_factory():
            raise RuntimeError("database unavailable")

        tracker = JobTracker()
        job_id = tracker.create()
        pipeline = _pipeline(tracker, fake_provider, session_factory=broken_session_factory)

        status = await pipeline.execute(job_id, _request())

        assert status == JobStatus.DONE
        assert tracker.get(job_id).status == JobStatus.DONE
