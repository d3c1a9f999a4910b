"""
Use Case Pipeline

Every use case runs the same fixed sequence:

    on_start -> validate -> after_validation -> before_execution
      -> [transaction: authenticate -> handle -> after_execution]
      -> completed | aborted (on_abort) | failed (on_error)
      -> on_finally

The transaction wraps the domain logic and the after_execution hooks, so an
error or abort raised there rolls every write back. on_finally runs exactly
once and cannot change the outcome.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel

from tenantkit.app.hooks import (
    Abort,
    HookContext,
    HookRunner,
    LifecyclePoint,
    Recover,
    UseCaseHooks,
    UseCaseState,
)
from tenantkit.app.services.ports import ClockPort, MetricsPort, UuidPort
from tenantkit.app.services.unit_of_work import RepositoryBundle, UnitOfWorkFactory
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.errors import AbortedError, DomainError, ForbiddenError
from tenantkit.domain.schema import CustomFieldsConfig, MergedSchema, NamingStrategy, merge_schemas

logger = logging.getLogger(__name__)

I = TypeVar("I", bound=BaseModel)
O = TypeVar("O")


class AbortRequested(Exception):
    """Carries an Abort out of the transaction so its writes are rolled back"""

    def __init__(self, signal: Abort):
        self.signal = signal
        super().__init__(signal.reason)


class BaseUseCase(ABC, Generic[I, O]):
    """
    Base class of every use case.

    Subclasses set `name` and `input_model` and implement handle(). When the
    input carries an entity's custom fields, pass that entity's
    CustomFieldsConfig; `partial_input` makes those fields optional (updates).
    """

    name: str = ""
    input_model: Type[BaseModel]
    partial_input = False
    requires_authentication = True

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        clock: ClockPort,
        uuid: UuidPort,
        hooks: Optional[UseCaseHooks] = None,
        metrics: Optional[MetricsPort] = None,
        custom_fields: Optional[CustomFieldsConfig] = None,
    ):
        self.unit_of_work_factory = unit_of_work_factory
        self.clock = clock
        self.uuid = uuid
        self.metrics = metrics
        self.custom_fields = custom_fields
        self.hooks = HookRunner(hooks, metrics)
        self.input_schema: MergedSchema = merge_schemas(
            self.input_model,
            custom_fields.schema_only() if custom_fields else None,
            NamingStrategy.identity,
            partial=self.partial_input,
        )

    def now(self):
        return self.clock.now()

    def new_id(self) -> str:
        return self.uuid.generate()

    def validate(self, raw_input: Any) -> I:
        if isinstance(raw_input, BaseModel):
            raw_input = raw_input.model_dump(exclude_unset=True)
        return self.input_schema.parse(raw_input if raw_input is not None else {})

    @abstractmethod
    async def handle(self, input: I, repos: RepositoryBundle, context: OperationContext) -> O:
        """Domain logic: load, authorize, mutate. Runs inside the transaction."""
        pass

    async def __call__(self, raw_input: Any, context: Optional[OperationContext] = None) -> O:
        return await self.execute(raw_input, context)

    async def execute(self, raw_input: Any, context: Optional[OperationContext] = None) -> O:
        """
        Run the pipeline.

        Returns:
            The output, an Abort's result, or an on_error recovery result

        Raises:
            DomainError: the failure (or AbortedError) after hooks ran
        """
        context = context or OperationContext(timestamp=self.now())
        ctx = HookContext(
            use_case_name=self.name,
            context=context,
            raw_input=raw_input,
            execution_id=self.new_id(),
        )
        started = time.perf_counter()
        try:
            return await self._run(ctx)
        finally:
            await self._finalize(ctx, started)

    async def _run(self, ctx: HookContext) -> O:
        try:
            abort = await self._advance(ctx)
        except AbortRequested as exc:
            abort = exc.signal
        except AbortedError as exc:
            abort = Abort(exc.reason)
        except Exception as exc:
            return await self._fail(ctx, exc)

        if abort is not None:
            return await self._abort(ctx, abort)

        ctx.state = UseCaseState.completed
        return ctx.output

    async def _advance(self, ctx: HookContext) -> Optional[Abort]:
        ctx.state = UseCaseState.started
        signal = await self.hooks.run(LifecyclePoint.on_start, ctx)
        if signal is not None:
            return signal

        ctx.input = self.validate(ctx.raw_input)
        ctx.state = UseCaseState.validated
        signal = await self.hooks.run(LifecyclePoint.after_validation, ctx)
        if signal is not None:
            return signal

        ctx.state = UseCaseState.pre_execution
        signal = await self.hooks.run(LifecyclePoint.before_execution, ctx)
        if signal is not None:
            return signal

        unit_of_work = self.unit_of_work_factory()
        ctx.output = await unit_of_work.transaction(lambda repos: self._execute(ctx, repos))
        return None

    async def _execute(self, ctx: HookContext, repos: RepositoryBundle) -> O:
        if self.requires_authentication and ctx.context.actor.is_anonymous:
            raise ForbiddenError("Authentication required")

        ctx.output = await self.handle(ctx.input, repos, ctx.context)
        ctx.state = UseCaseState.executed

        signal = await self.hooks.run(LifecyclePoint.after_execution, ctx)
        if signal is not None:
            raise AbortRequested(signal)
        return ctx.output

    async def _abort(self, ctx: HookContext, signal: Abort) -> O:
        ctx.state = UseCaseState.aborted
        ctx.shared.setdefault("abort_reason", signal.reason)
        logger.info("%s[%s] aborted: %s", self.name, ctx.execution_id, signal.reason)

        try:
            await self.hooks.run(LifecyclePoint.on_abort, ctx)
        except Exception as exc:
            return await self._fail(ctx, exc)

        if signal.has_result:
            ctx.output = signal.result
            return signal.result
        raise AbortedError(signal.reason)

    async def _fail(self, ctx: HookContext, error: Exception) -> O:
        ctx.state = UseCaseState.failed
        ctx.error = error
        if isinstance(error, DomainError):
            logger.warning("%s[%s] failed: %s %s", self.name, ctx.execution_id, error.code, error.message)
        else:
            logger.exception("%s[%s] failed unexpectedly", self.name, ctx.execution_id)

        try:
            signal = await self.hooks.run(LifecyclePoint.on_error, ctx)
        except Exception as hook_error:
            ctx.error = hook_error
            raise hook_error from error

        if isinstance(signal, Recover):
            logger.info("%s[%s] recovered by on_error hook", self.name, ctx.execution_id)
            ctx.output = signal.result
            return signal.result
        raise error

    async def _finalize(self, ctx: HookContext, started: float) -> None:
        outcome = ctx.state.value
        try:
            await self.hooks.run(LifecyclePoint.on_finally, ctx)
        except Exception:
            logger.exception("%s[%s] on_finally hook failed", self.name, ctx.execution_id)
        ctx.state = UseCaseState.finalized

        if self.metrics is not None:
            tags = {"use_case": self.name, "outcome": outcome}
            try:
                self.metrics.increment("use_case.execution", tags)
                self.metrics.timing(
                    "use_case.duration", (time.perf_counter() - started) * 1000, tags
                )
            except Exception as exc:
                logger.warning("Metrics sink failed: %s", exc)
