"""
Lifecycle Hooks

Callbacks registered per use case and lifecycle point. Hooks run strictly
sequentially in registration order; later hooks see mutations made by earlier
ones. A hook steers the pipeline by returning a signal built from its
HookContext:

    def reject_guests(ctx):
        if ctx.input.username.startswith("guest-"):
            return ctx.abort("guests are not allowed")

    hooks = UseCaseHooks().register(LifecyclePoint.after_validation, reject_guests)
"""

import inspect
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

from tenantkit.app.services.ports import MetricsPort
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.base import generate_uuid

logger = logging.getLogger(__name__)


class LifecyclePoint(str, Enum):
    on_start = "on_start"
    after_validation = "after_validation"
    before_execution = "before_execution"
    after_execution = "after_execution"
    on_error = "on_error"
    on_abort = "on_abort"
    on_finally = "on_finally"


# Points where a returned Abort stops the pipeline
ABORTABLE_POINTS = frozenset(
    {
        LifecyclePoint.on_start,
        LifecyclePoint.after_validation,
        LifecyclePoint.before_execution,
        LifecyclePoint.after_execution,
    }
)


class UseCaseState(str, Enum):
    created = "created"
    started = "started"
    validated = "validated"
    pre_execution = "pre_execution"
    executed = "executed"
    completed = "completed"
    aborted = "aborted"
    failed = "failed"
    finalized = "finalized"


_NO_RESULT = object()


@dataclass(frozen=True)
class Abort:
    """Stop the pipeline. Without a result the caller gets AbortedError."""

    reason: str = "aborted"
    result: Any = _NO_RESULT

    @property
    def has_result(self) -> bool:
        return self.result is not _NO_RESULT


@dataclass(frozen=True)
class Recover:
    """Replace a failure with a substitute result (on_error only)"""

    result: Any = None


HookSignal = Union[Abort, Recover]


@dataclass
class HookContext:
    use_case_name: str
    context: OperationContext
    raw_input: Any = None
    execution_id: str = field(default_factory=generate_uuid)
    input: Any = None
    output: Any = None
    error: Optional[BaseException] = None
    state: UseCaseState = UseCaseState.created
    shared: Dict[str, Any] = field(default_factory=dict)

    def abort(self, reason: str = "aborted", result: Any = _NO_RESULT) -> Abort:
        return Abort(reason, result)

    def recover(self, result: Any = None) -> Recover:
        return Recover(result)


Hook = Callable[[HookContext], Union[None, HookSignal, Awaitable[Optional[HookSignal]]]]


class UseCaseHooks:
    """Ordered hook lists, one per lifecycle point"""

    def __init__(self):
        self._hooks: Dict[LifecyclePoint, List[Hook]] = {point: [] for point in LifecyclePoint}

    def register(self, point: Union[LifecyclePoint, str], hook: Hook) -> "UseCaseHooks":
        if not callable(hook):
            raise TypeError(f"Hook for {point} must be callable, got {type(hook).__name__}")
        self._hooks[LifecyclePoint(point)].append(hook)
        return self

    def hooks_for(self, point: LifecyclePoint) -> Sequence[Hook]:
        return tuple(self._hooks[point])

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())

    @classmethod
    def from_config(cls, config: Mapping[str, Union[Hook, Sequence[Hook]]]) -> "UseCaseHooks":
        """
        Build from {point name: hook or list of hooks}.

        Order within a point is the list order. Points are independent, so the
        order of keys in the mapping carries no meaning.
        """
        hooks = cls()
        for point, value in config.items():
            callbacks = value if isinstance(value, (list, tuple)) else [value]
            for callback in callbacks:
                hooks.register(point, callback)
        return hooks


class HooksConfig(dict):
    """Use case name -> UseCaseHooks"""

    def for_use_case(self, name: str) -> UseCaseHooks:
        hooks = self.get(name)
        if hooks is None:
            return UseCaseHooks()
        if isinstance(hooks, UseCaseHooks):
            return hooks
        return UseCaseHooks.from_config(hooks)


class HookRunner:
    """Runs the hooks of one use case, reporting each invocation to metrics"""

    def __init__(self, hooks: Optional[UseCaseHooks] = None, metrics: Optional[MetricsPort] = None):
        self.hooks = hooks or UseCaseHooks()
        self.metrics = metrics

    async def run(self, point: LifecyclePoint, ctx: HookContext) -> Optional[HookSignal]:
        """
        Run every hook of `point` in registration order.

        Returns the first Abort (abortable points) or Recover (on_error) a hook
        returns, skipping the remaining hooks of the point. Exceptions raised by
        a hook propagate unchanged.
        """
        logger.debug("%s[%s] %s", ctx.use_case_name, ctx.execution_id, point.value)

        for hook in self.hooks.hooks_for(point):
            started = time.perf_counter()
            outcome = "ok"
            try:
                signal = hook(ctx)
                if inspect.isawaitable(signal):
                    signal = await signal
            except BaseException:
                outcome = "error"
                raise
            finally:
                self._report(ctx, point, hook, outcome, started)

            if isinstance(signal, Abort) and point in ABORTABLE_POINTS:
                return signal
            if isinstance(signal, Recover) and point == LifecyclePoint.on_error:
                return signal
            if signal is not None:
                logger.debug(
                    "Ignoring %s returned by %s hook of %s",
                    type(signal).__name__,
                    point.value,
                    ctx.use_case_name,
                )
        return None

    def _report(
        self, ctx: HookContext, point: LifecyclePoint, hook: Hook, outcome: str, started: float
    ) -> None:
        if self.metrics is None:
            return
        tags = {
            "use_case": ctx.use_case_name,
            "point": point.value,
            "hook": getattr(hook, "__name__", type(hook).__name__),
            "outcome": outcome,
        }
        try:
            self.metrics.increment("use_case.hook", tags)
            self.metrics.timing("use_case.hook.duration", (time.perf_counter() - started) * 1000, tags)
        except Exception as exc:
            logger.warning("Metrics sink failed: %s", exc)
