"""Gateway response classification state machine.

Every gateway response starts `UNCLASSIFIED` and moves exactly once to one of
three terminal states that decide how the caller's envelope is shaped.
"""

from enum import Enum


class ResponseState(str, Enum):
    UNCLASSIFIED = "UNCLASSIFIED"
    HTTP_FAILURE = "HTTP_FAILURE"
    HTML_SUCCESS = "HTML_SUCCESS"
    JSON_SUCCESS = "JSON_SUCCESS"


ALLOWED_TRANSITIONS: dict[ResponseState, set[ResponseState]] = {
    ResponseState.UNCLASSIFIED: {
        ResponseState.HTTP_FAILURE,
        ResponseState.HTML_SUCCESS,
        ResponseState.JSON_SUCCESS,
    },
    ResponseState.HTTP_FAILURE: set(),
    ResponseState.HTML_SUCCESS: set(),
    ResponseState.JSON_SUCCESS: set(),
}


def validate_transition(current: ResponseState, new: ResponseState) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValueError(f"Invalid transition: {current.value} -> {new.value}")


def is_successful(status_code: int) -> bool:
    return 200 <= status_code < 300


def classify(status_code: int, content_type: str | None) -> ResponseState:
    """Pick the terminal state for a gateway response.

    Rules are evaluated in order: non-2xx status, then an HTML content type
    (substring match, gateways append charset parameters), then JSON.
    """

    if not is_successful(status_code):
        new = ResponseState.HTTP_FAILURE
    elif "text/html" in (content_type or "").lower():
        new = ResponseState.HTML_SUCCESS
    else:
        new = ResponseState.JSON_SUCCESS
    validate_transition(ResponseState.UNCLASSIFIED, new)
    return new
