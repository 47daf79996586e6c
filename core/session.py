"""Request tokens and observable screen state for the classification screen."""

import itertools
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from core.utils import (
    DEFAULT_TARGET_SIZE,
    ClassificationOutcome,
    ClassificationRequest,
    Phase,
    ScreenState,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[ScreenState], None]

_IN_FLIGHT = (Phase.PREPROCESSING, Phase.INFERRING)


class ClassificationSession:
    """Owns the current ScreenState and decides which outcomes are still current.

    Every submission gets a new request_id. Progress and outcomes carrying an
    older id are dropped, so a slow request can never overwrite the result of
    a newer one. Listeners run synchronously on the calling thread.
    """

    def __init__(self, target_size: int = DEFAULT_TARGET_SIZE):
        self._target_size = target_size
        self._ids = itertools.count(1)
        self._latest_id = 0
        self._state = ScreenState()
        self._before_picker = self._state
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> ScreenState:
        return self._state

    @property
    def latest_request_id(self) -> int:
        return self._latest_id

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest_id

    # -- Transitions --------------------------------------------------------

    def await_image(self) -> None:
        """The image picker is open."""
        if self._state.phase != Phase.AWAITING_IMAGE:
            self._before_picker = self._state
        self._set_state(replace(self._state, phase=Phase.AWAITING_IMAGE))

    def cancel_selection(self) -> None:
        """The picker was closed without choosing an image."""
        if self._state.phase == Phase.AWAITING_IMAGE:
            self._set_state(self._before_picker)

    def submit(self, input_path: Optional[str]) -> Optional[ClassificationRequest]:
        """Start a request for input_path.

        Returns None and leaves the state untouched when no image is selected.
        """
        if not input_path:
            return None

        request = ClassificationRequest(
            request_id=next(self._ids),
            input_path=input_path,
            target_size=self._target_size,
        )
        self._latest_id = request.request_id
        self._set_state(ScreenState(
            phase=Phase.PREPROCESSING,
            request_id=request.request_id,
            input_path=input_path,
            message=self._state.message,
        ))
        return request

    def advance(self, request_id: int, phase: Phase) -> bool:
        """Record an in-flight phase change for request_id."""
        if not self.is_current(request_id) or phase not in _IN_FLIGHT:
            return False
        if self._state.phase == Phase.AWAITING_IMAGE:
            self._before_picker = replace(self._before_picker, phase=phase)
            return True
        if self._state.phase == phase:
            return True
        self._set_state(replace(self._state, phase=phase))
        return True

    def complete(self, outcome: ClassificationOutcome) -> bool:
        """Publish an outcome; returns False if it belongs to a superseded request."""
        if not self.is_current(outcome.request_id):
            logger.debug(
                "Discarding stale outcome %d (latest is %d)",
                outcome.request_id, self._latest_id,
            )
            return False

        phase = Phase.DISPLAYING_RESULT if outcome.success else Phase.DISPLAYING_ERROR
        self._set_state(ScreenState(
            phase=phase,
            request_id=outcome.request_id,
            input_path=outcome.input_path,
            message=outcome.message,
            outcome=outcome,
        ))
        return True

    def fail(self, request_id: int, message: str) -> bool:
        """Publish an unexpected worker error for request_id."""
        if not self.is_current(request_id):
            return False
        self._set_state(replace(
            self._state, phase=Phase.DISPLAYING_ERROR, message=message, outcome=None,
        ))
        return True

    def reset(self) -> None:
        """Back to idle with the placeholder text; in-flight results become stale."""
        self._latest_id = next(self._ids)
        self._set_state(ScreenState())

    def _set_state(self, state: ScreenState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
