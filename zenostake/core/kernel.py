"""Dispatch-table driver shared by the staking kernels.

``run_step(dispatch, state, params)`` is what each kernel's ``step()`` calls. It:

1. Dispatches to the operation registered for ``params.action``.
2. Converts a raised ``StakingError`` into a rejected ``StepResult``.
3. Checks the kernel's invariants on the (pre, post) state pair.
4. Returns a ``StepResult`` (accepted, or rejected with a reason code).

Operations never mutate their input state, so a rejection is always a clean
abort: the caller still holds the untouched pre-state.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional, TypeVar

from .errors import InvariantViolation, StakingError
from .types import Action, ActionParams, Effect, StepResult

S = TypeVar("S")

OperationFn = Callable[[S, ActionParams], tuple[S, Effect]]
InvariantCheck = Callable[[S, S], list[str]]


def run_step(
    dispatch: Mapping[Action, OperationFn],
    state: S,
    params: ActionParams,
    *,
    invariants: Optional[InvariantCheck] = None,
) -> StepResult[S]:
    operation = dispatch.get(params.action)
    if operation is None:
        return StepResult(accepted=False, rejection=f"unknown_action:{params.action.value}")

    try:
        new_state, effect = operation(state, params)
    except StakingError as exc:
        return StepResult(accepted=False, rejection=exc.code, error=exc)

    if invariants is not None:
        violations = invariants(state, new_state)
        if violations:
            return StepResult(
                accepted=False,
                rejection=f"invariant:{','.join(violations)}",
                error=InvariantViolation(violations),
            )

    return StepResult(accepted=True, state=new_state, effect=effect)


def raise_on_rejection(result: StepResult[S]) -> StepResult[S]:
    """Return an accepted result unchanged, otherwise raise its error.

    Raises:
        StakingError: The taxonomy error that rejected the step (``ZeroAmount``,
            ``InsufficientBalance``, ``InvariantViolation``, ...).
    """
    if result.accepted:
        return result
    if result.error is not None:
        raise result.error
    raise StakingError(result.rejection)
