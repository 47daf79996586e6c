"""Tests for core.session module."""

import pytest

from core.session import ClassificationSession
from core.utils import (
    PLACEHOLDER_TEXT,
    ClassificationOutcome,
    ClassificationResult,
    ErrorKind,
    Phase,
)


@pytest.fixture
def session():
    return ClassificationSession(target_size=224)


@pytest.fixture
def states(session):
    seen = []
    session.subscribe(seen.append)
    return seen


def success_outcome(request_id, path="/photos/a.jpg"):
    return ClassificationOutcome(
        request_id=request_id,
        success=True,
        message="melanoma with a confidence of 87.34%.",
        result=ClassificationResult(label="melanoma", probabilities={"melanoma": 0.8734}),
        input_path=path,
    )


class TestInitialState:
    def test_idle_with_placeholder(self, session):
        assert session.state.phase == Phase.IDLE
        assert session.state.message == PLACEHOLDER_TEXT
        assert session.latest_request_id == 0


class TestSubmit:
    def test_no_image_starts_nothing(self, session, states):
        assert session.submit(None) is None
        assert session.submit("") is None
        assert session.state.message == PLACEHOLDER_TEXT
        assert session.state.phase == Phase.IDLE
        assert states == []

    def test_submit_creates_request(self, session, states):
        request = session.submit("/photos/a.jpg")
        assert request.request_id == 1
        assert request.input_path == "/photos/a.jpg"
        assert request.target_size == 224
        assert session.state.phase == Phase.PREPROCESSING
        assert session.state.busy
        assert len(states) == 1

    def test_request_ids_increase(self, session):
        first = session.submit("/photos/a.jpg")
        second = session.submit("/photos/b.jpg")
        assert second.request_id > first.request_id
        assert session.is_current(second.request_id)
        assert not session.is_current(first.request_id)

    def test_previous_message_kept_while_busy(self, session):
        request = session.submit("/photos/a.jpg")
        session.complete(success_outcome(request.request_id))
        session.submit("/photos/b.jpg")
        assert session.state.message.startswith("melanoma")


class TestComplete:
    def test_success(self, session):
        request = session.submit("/photos/a.jpg")
        assert session.complete(success_outcome(request.request_id))
        assert session.state.phase == Phase.DISPLAYING_RESULT
        assert session.state.message == "melanoma with a confidence of 87.34%."
        assert session.state.outcome.result.label == "melanoma"

    def test_error(self, session):
        request = session.submit("/photos/a.jpg")
        outcome = ClassificationOutcome(
            request_id=request.request_id,
            success=False,
            message="Error converting image.",
            error_kind=ErrorKind.PREPROCESSING,
        )
        assert session.complete(outcome)
        assert session.state.phase == Phase.DISPLAYING_ERROR
        assert session.state.message == "Error converting image."

    def test_stale_outcome_discarded(self, session, states):
        first = session.submit("/photos/a.jpg")
        second = session.submit("/photos/b.jpg")
        seen_before = len(states)

        assert not session.complete(success_outcome(first.request_id))
        assert session.state.phase == Phase.PREPROCESSING
        assert session.state.request_id == second.request_id
        assert len(states) == seen_before

    def test_late_result_does_not_overwrite_newer(self, session):
        first = session.submit("/photos/a.jpg")
        second = session.submit("/photos/b.jpg")
        session.complete(success_outcome(second.request_id, path="/photos/b.jpg"))
        session.complete(success_outcome(first.request_id))
        assert session.state.input_path == "/photos/b.jpg"

    def test_fail(self, session):
        request = session.submit("/photos/a.jpg")
        assert session.fail(request.request_id, "Analysis failed: boom")
        assert session.state.phase == Phase.DISPLAYING_ERROR
        assert session.state.message == "Analysis failed: boom"

    def test_fail_stale(self, session):
        first = session.submit("/photos/a.jpg")
        session.submit("/photos/b.jpg")
        assert not session.fail(first.request_id, "Analysis failed: boom")
        assert session.state.phase == Phase.PREPROCESSING


class TestAdvance:
    def test_to_inferring(self, session):
        request = session.submit("/photos/a.jpg")
        assert session.advance(request.request_id, Phase.INFERRING)
        assert session.state.phase == Phase.INFERRING

    def test_stale_ignored(self, session):
        first = session.submit("/photos/a.jpg")
        session.submit("/photos/b.jpg")
        assert not session.advance(first.request_id, Phase.INFERRING)
        assert session.state.phase == Phase.PREPROCESSING

    def test_only_in_flight_phases(self, session):
        request = session.submit("/photos/a.jpg")
        assert not session.advance(request.request_id, Phase.DISPLAYING_RESULT)
        assert session.state.phase == Phase.PREPROCESSING

    def test_same_phase_does_not_notify(self, session, states):
        request = session.submit("/photos/a.jpg")
        count = len(states)
        assert session.advance(request.request_id, Phase.PREPROCESSING)
        assert len(states) == count


class TestPicker:
    def test_cancel_restores_previous_state(self, session):
        request = session.submit("/photos/a.jpg")
        session.complete(success_outcome(request.request_id))
        session.await_image()
        assert session.state.phase == Phase.AWAITING_IMAGE
        session.cancel_selection()
        assert session.state.phase == Phase.DISPLAYING_RESULT
        assert session.state.message.startswith("melanoma")

    def test_cancel_from_idle(self, session):
        session.await_image()
        session.cancel_selection()
        assert session.state.phase == Phase.IDLE
        assert session.state.message == PLACEHOLDER_TEXT

    def test_progress_while_picker_open(self, session):
        request = session.submit("/photos/a.jpg")
        session.await_image()
        session.advance(request.request_id, Phase.INFERRING)
        assert session.state.phase == Phase.AWAITING_IMAGE
        session.cancel_selection()
        assert session.state.phase == Phase.INFERRING

    def test_outcome_while_picker_open(self, session):
        request = session.submit("/photos/a.jpg")
        session.await_image()
        session.complete(success_outcome(request.request_id))
        assert session.state.phase == Phase.DISPLAYING_RESULT

    def test_cancel_without_picker_is_noop(self, session, states):
        session.cancel_selection()
        assert states == []


class TestReset:
    def test_reset_to_placeholder(self, session):
        request = session.submit("/photos/a.jpg")
        session.complete(success_outcome(request.request_id))
        session.reset()
        assert session.state.phase == Phase.IDLE
        assert session.state.message == PLACEHOLDER_TEXT

    def test_in_flight_becomes_stale(self, session):
        request = session.submit("/photos/a.jpg")
        session.reset()
        assert not session.complete(success_outcome(request.request_id))
        assert session.state.phase == Phase.IDLE


class TestSubscribe:
    def test_listener_receives_snapshots(self, session, states):
        request = session.submit("/photos/a.jpg")
        session.advance(request.request_id, Phase.INFERRING)
        session.complete(success_outcome(request.request_id))
        assert [s.phase for s in states] == [
            Phase.PREPROCESSING, Phase.INFERRING, Phase.DISPLAYING_RESULT,
        ]

    def test_unsubscribe(self, session):
        seen = []
        unsubscribe = session.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        session.submit("/photos/a.jpg")
        assert seen == []
