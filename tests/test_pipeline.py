import asyncio

import pytest

from core.domain.models import SCORE_MAX, SCORE_MIN, ContentBatch, RequestContext, ResolvedSubject
from core.domain.outcomes import (
    InternalError,
    InvalidInput,
    NothingToAnalyze,
    ParseFailure,
    RateLimited,
    Stage,
    SubjectNotFound,
    Success,
    UpstreamFailure,
)
from core.errors import SubjectNotFoundError, UpstreamError
from core.services.analysis_pipeline import PostsListing
from core.services.validation import DEMO_CONTENT
from fakes import (
    FakeClock,
    FakeDirectory,
    FakeGenerator,
    FakeTimeline,
    failed_trial,
    make_pipeline,
    success_trial,
)


def _run(pipeline, username, client_key="203.0.113.1"):
    return asyncio.run(pipeline.run(RequestContext(client_key=client_key, raw_identifier=username)))


def test_happy_path_returns_bounded_result_and_avatar():
    directory = FakeDirectory(
        ResolvedSubject(subject_id="42", handle="jack", avatar_url="https://img.test/a_400x400.jpg")
    )
    timeline = FakeTimeline(ContentBatch.from_texts(["one", "two"]))
    generator = FakeGenerator()
    pipeline = make_pipeline(directory=directory, timeline=timeline, generator=generator)

    outcome = _run(pipeline, " jack ")

    assert isinstance(outcome, Success)
    assert (outcome.result.x, outcome.result.y, outcome.result.explanation) == (5, -3, "test roast")
    assert SCORE_MIN <= outcome.result.x <= SCORE_MAX
    assert SCORE_MIN <= outcome.result.y <= SCORE_MAX
    assert outcome.avatar_url == "https://img.test/a_400x400.jpg"
    assert directory.calls == ["jack"]
    assert timeline.calls == ["42"]
    system_prompt, user_prompt = generator.calls[0]
    assert "1. one\n2. two" in user_prompt
    assert "@jack" in user_prompt


@pytest.mark.parametrize("username", ["", "   ", "a" * 16, "bad-name", "sp ace", "emoji🙂", "semi;colon"])
def test_invalid_identifiers_make_no_network_calls(username):
    directory, timeline, generator = FakeDirectory(), FakeTimeline(), FakeGenerator()
    pipeline = make_pipeline(directory=directory, timeline=timeline, generator=generator)

    outcome = _run(pipeline, username)

    assert isinstance(outcome, InvalidInput)
    assert directory.calls == []
    assert timeline.calls == []
    assert generator.calls == []


def test_rate_limit_is_checked_before_anything_else():
    clock = FakeClock()
    directory = FakeDirectory()
    pipeline = make_pipeline(directory=directory, clock=clock)

    assert isinstance(_run(pipeline, "jack"), Success)
    assert isinstance(_run(pipeline, "jack"), RateLimited)
    assert isinstance(_run(pipeline, "not valid!"), RateLimited)
    assert directory.calls == ["jack"]

    assert isinstance(_run(pipeline, "jack", client_key="other"), Success)

    clock.advance(60)
    assert isinstance(_run(pipeline, "jack"), Success)


def test_demo_identifier_skips_x_lookups():
    directory, timeline, generator = FakeDirectory(), FakeTimeline(), FakeGenerator()
    pipeline = make_pipeline(directory=directory, timeline=timeline, generator=generator)

    outcome = _run(pipeline, "test123")

    assert isinstance(outcome, Success)
    assert outcome.avatar_url is None
    assert directory.calls == []
    assert timeline.calls == []
    _, user_prompt = generator.calls[0]
    assert f"1. {DEMO_CONTENT.items[0].text}" in user_prompt
    assert "@test123" in user_prompt


def test_empty_timeline_means_nothing_to_analyze():
    generator = FakeGenerator()
    directory = FakeDirectory(ResolvedSubject(subject_id="7", handle="quiet", avatar_url="https://img.test/q.jpg"))
    pipeline = make_pipeline(directory=directory, timeline=FakeTimeline(ContentBatch()), generator=generator)

    outcome = _run(pipeline, "quiet")

    assert outcome == NothingToAnalyze(avatar_url="https://img.test/q.jpg")
    assert generator.calls == []


def test_unknown_subject():
    pipeline = make_pipeline(directory=FakeDirectory(error=SubjectNotFoundError("ghost")))
    assert _run(pipeline, "ghost") == SubjectNotFound(identifier="ghost")


@pytest.mark.parametrize("stage", [Stage.IDENTITY, Stage.CONTENT])
def test_x_failures_carry_stage_and_status(stage):
    error = UpstreamError(stage, 503)
    if stage is Stage.IDENTITY:
        pipeline = make_pipeline(directory=FakeDirectory(error=error))
    else:
        pipeline = make_pipeline(timeline=FakeTimeline(error=error))

    assert _run(pipeline, "jack") == UpstreamFailure(stage=stage, status=503)


def test_generation_failure_reports_last_status_and_rate_limit():
    pipeline = make_pipeline(generator=FakeGenerator(failed_trial(429, 503, 429)))
    assert _run(pipeline, "jack") == UpstreamFailure(stage=Stage.GENERATION, status=429, rate_limited=True)


def test_terminal_generation_failure():
    pipeline = make_pipeline(generator=FakeGenerator(failed_trial(404, terminal=True)))
    assert _run(pipeline, "jack") == UpstreamFailure(stage=Stage.GENERATION, status=404, rate_limited=False)


@pytest.mark.parametrize(
    "body",
    ["", "I refuse to rank people.", "x: 42\ny: 0\nExplanation: too much", "x: 1\ny: two\nExplanation: nope"],
)
def test_bad_model_output_is_a_parse_failure(body):
    pipeline = make_pipeline(generator=FakeGenerator(success_trial(body)))
    assert isinstance(_run(pipeline, "jack"), ParseFailure)


def test_unexpected_errors_become_internal_error():
    pipeline = make_pipeline(directory=FakeDirectory(error=RuntimeError("kaboom")))
    assert isinstance(_run(pipeline, "jack"), InternalError)


def test_cancellation_is_not_swallowed():
    class SlowTimeline(FakeTimeline):
        async def fetch_recent(self, subject_id):
            self.calls.append(subject_id)
            await asyncio.sleep(10)
            return self.batch

    timeline = SlowTimeline()
    pipeline = make_pipeline(timeline=timeline)

    async def scenario():
        task = asyncio.ensure_future(pipeline.run(RequestContext(client_key="k", raw_identifier="jack")))
        while not timeline.calls:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())


def test_list_posts_returns_listing_or_outcome():
    pipeline = make_pipeline(timeline=FakeTimeline(ContentBatch.from_texts(["a", "b"])))

    listing = asyncio.run(pipeline.list_posts(RequestContext(client_key="k1", raw_identifier="jack")))
    assert isinstance(listing, PostsListing)
    assert [item.text for item in listing.batch.items] == ["a", "b"]

    invalid = asyncio.run(pipeline.list_posts(RequestContext(client_key="k2", raw_identifier="no way")))
    assert isinstance(invalid, InvalidInput)
