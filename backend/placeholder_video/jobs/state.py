"""
State transition validation for the generator.

Lifecycle:
    LOADING -> IDLE -> GENERATING -> SUCCESS | ERROR
    SUCCESS | ERROR -> GENERATING  (resubmission)
    SUCCESS | ERROR -> IDLE        (configuration edited)

GENERATING is the only state that rejects submissions.
No cancellation: GENERATING can only end in SUCCESS or ERROR.
"""

from typing import FrozenSet, Set, Tuple

from .errors import InvalidStateTransitionError
from .models import GenerationState


OUTCOME_STATES: FrozenSet[GenerationState] = frozenset({
    GenerationState.SUCCESS,
    GenerationState.ERROR,
})

SUBMITTABLE_STATES: FrozenSet[GenerationState] = frozenset({
    GenerationState.IDLE,
    GenerationState.SUCCESS,
    GenerationState.ERROR,
})


_TRANSITIONS: Set[Tuple[GenerationState, GenerationState]] = {
    # Engine became ready
    (GenerationState.LOADING, GenerationState.IDLE),

    # Submission
    (GenerationState.IDLE, GenerationState.GENERATING),
    (GenerationState.SUCCESS, GenerationState.GENERATING),
    (GenerationState.ERROR, GenerationState.GENERATING),

    # Outcome
    (GenerationState.GENERATING, GenerationState.SUCCESS),
    (GenerationState.GENERATING, GenerationState.ERROR),

    # Edit after outcome: message cleared, artifact retained
    (GenerationState.SUCCESS, GenerationState.IDLE),
    (GenerationState.ERROR, GenerationState.IDLE),
}


def is_outcome(state: GenerationState) -> bool:
    return state in OUTCOME_STATES


def can_submit(state: GenerationState) -> bool:
    return state in SUBMITTABLE_STATES


def can_transition(from_state: GenerationState, to_state: GenerationState) -> bool:
    """
    Check if a generator state transition is legal.

    Staying in the same state is always allowed, except GENERATING:
    a second GENERATING entry would mean two transcodes in flight.
    """
    if from_state == to_state:
        return from_state != GenerationState.GENERATING
    return (from_state, to_state) in _TRANSITIONS


def validate_transition(from_state: GenerationState, to_state: GenerationState) -> None:
    """
    Raises:
        InvalidStateTransitionError: If the transition is not allowed
    """
    if not can_transition(from_state, to_state):
        raise InvalidStateTransitionError(from_state.value, to_state.value)
