import pytest

from tenantkit.app.hooks import (
    HookContext,
    HookRunner,
    LifecyclePoint,
    UseCaseHooks,
    UseCaseState,
)
from tenantkit.container import ToolkitOptions, build_in_memory_adapters, build_use_cases
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.errors import AbortedError, ForbiddenError, ValidationError
from tests.fixtures.builders import RecordingMetrics, SequentialUuid, TickingClock, make_context


def create_user_with(adapters, hooks):
    options = ToolkitOptions(hooks={"create_user": hooks})
    return build_use_cases(adapters, options).create_user


def recorder(calls, label):
    def hook(ctx):
        calls.append((label, ctx.state))

    hook.__name__ = label
    return hook


# ----------------------------------------------------------------------------
# Registration
# ----------------------------------------------------------------------------


def test_register_is_chainable_and_keeps_order():
    first, second = (lambda ctx: None), (lambda ctx: None)

    hooks = UseCaseHooks().register("on_start", first).register(LifecyclePoint.on_start, second)

    assert hooks.hooks_for(LifecyclePoint.on_start) == (first, second)
    assert len(hooks) == 2


def test_register_rejects_non_callables():
    with pytest.raises(TypeError):
        UseCaseHooks().register(LifecyclePoint.on_start, "not a hook")


def test_register_rejects_unknown_points():
    with pytest.raises(ValueError):
        UseCaseHooks().register("before_everything", lambda ctx: None)


def test_from_config_accepts_single_hooks_and_lists():
    first, second, third = (lambda ctx: None), (lambda ctx: None), (lambda ctx: None)

    hooks = UseCaseHooks.from_config({"on_finally": first, "on_start": [second, third]})

    assert hooks.hooks_for(LifecyclePoint.on_start) == (second, third)
    assert hooks.hooks_for(LifecyclePoint.on_finally) == (first,)


@pytest.mark.asyncio
async def test_runner_ignores_abort_outside_abortable_points():
    hooks = UseCaseHooks().register(LifecyclePoint.on_finally, lambda ctx: ctx.abort("late"))
    ctx = HookContext(use_case_name="noop", context=OperationContext())

    assert await HookRunner(hooks).run(LifecyclePoint.on_finally, ctx) is None


# ----------------------------------------------------------------------------
# Lifecycle order
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_successful_run_visits_points_in_order(adapters, owner_ctx):
    calls = []
    hooks = UseCaseHooks()
    for point in LifecyclePoint:
        hooks.register(point, recorder(calls, point.value))
    create_user = create_user_with(adapters, hooks)

    await create_user({"username": "owner"}, owner_ctx)

    assert calls == [
        ("on_start", UseCaseState.started),
        ("after_validation", UseCaseState.validated),
        ("before_execution", UseCaseState.pre_execution),
        ("after_execution", UseCaseState.executed),
        ("on_finally", UseCaseState.completed),
    ]


@pytest.mark.asyncio
async def test_hooks_of_one_point_run_sequentially_and_share_state(adapters, owner_ctx):
    seen = []

    def first(ctx):
        ctx.shared["trace"] = ["first"]

    async def second(ctx):
        ctx.shared["trace"].append("second")
        seen.extend(ctx.shared["trace"])

    create_user = create_user_with(adapters, {"on_start": [first, second]})

    await create_user({"username": "owner"}, owner_ctx)

    assert seen == ["first", "second"]


@pytest.mark.asyncio
async def test_before_execution_may_rewrite_validated_input(adapters, store, owner_ctx):
    def normalize(ctx):
        ctx.input.username = ctx.input.username.lower()

    create_user = create_user_with(adapters, {"before_execution": normalize})

    user = await create_user({"username": "OWNER"}, owner_ctx)

    assert user.username == "owner"
    assert (await store.users.find_by_id(user.id)).username == "owner"


# ----------------------------------------------------------------------------
# Abort
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_abort_without_result_raises_aborted_error(adapters, store, owner_ctx):
    calls = []
    create_user = create_user_with(
        adapters,
        {
            "on_start": lambda ctx: ctx.abort("maintenance"),
            "after_validation": recorder(calls, "after_validation"),
            "on_abort": recorder(calls, "on_abort"),
            "on_finally": recorder(calls, "on_finally"),
        },
    )

    # Invalid input: the abort happens before validation
    with pytest.raises(AbortedError) as exc_info:
        await create_user({"username": ""}, owner_ctx)

    assert exc_info.value.reason == "maintenance"
    assert calls == [("on_abort", UseCaseState.aborted), ("on_finally", UseCaseState.aborted)]
    assert store.users.rows == {}


@pytest.mark.asyncio
async def test_abort_with_result_returns_it(adapters, store, owner_ctx):
    create_user = create_user_with(
        adapters, {"after_validation": lambda ctx: ctx.abort("cached", result="cached-user")}
    )

    assert await create_user({"username": "owner"}, owner_ctx) == "cached-user"
    assert store.users.rows == {}


@pytest.mark.asyncio
async def test_abort_after_execution_rolls_back_writes(adapters, store, owner_ctx):
    create_user = create_user_with(
        adapters, {"after_execution": lambda ctx: ctx.abort("quota exceeded")}
    )

    with pytest.raises(AbortedError):
        await create_user({"username": "owner"}, owner_ctx)

    assert store.users.rows == {}


@pytest.mark.asyncio
async def test_raising_aborted_error_from_a_hook_aborts(adapters, owner_ctx):
    calls = []

    def refuse(ctx):
        raise AbortedError("refused")

    create_user = create_user_with(
        adapters, {"before_execution": refuse, "on_abort": recorder(calls, "on_abort")}
    )

    with pytest.raises(AbortedError):
        await create_user({"username": "owner"}, owner_ctx)

    assert calls == [("on_abort", UseCaseState.aborted)]


# ----------------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_after_execution_error_rolls_back_and_reaches_on_error(adapters, store, owner_ctx):
    errors = []

    def explode(ctx):
        raise RuntimeError("audit sink down")

    create_user = create_user_with(
        adapters,
        {"after_execution": explode, "on_error": lambda ctx: errors.append(ctx.error)},
    )

    with pytest.raises(RuntimeError):
        await create_user({"username": "owner"}, owner_ctx)

    assert store.users.rows == {}
    assert len(errors) == 1 and str(errors[0]) == "audit sink down"


@pytest.mark.asyncio
async def test_on_start_errors_go_through_on_error(adapters, owner_ctx):
    errors = []

    def explode(ctx):
        raise RuntimeError("boom")

    create_user = create_user_with(
        adapters, {"on_start": explode, "on_error": lambda ctx: errors.append(ctx.state)}
    )

    with pytest.raises(RuntimeError):
        await create_user({"username": "owner"}, owner_ctx)

    assert errors == [UseCaseState.failed]


@pytest.mark.asyncio
async def test_on_error_recover_replaces_failure(adapters, owner_ctx):
    create_user = create_user_with(adapters, {"on_error": lambda ctx: ctx.recover("fallback")})

    assert await create_user({"username": ""}, owner_ctx) == "fallback"


@pytest.mark.asyncio
async def test_on_error_hook_error_replaces_original_and_chains_it(adapters, owner_ctx):
    def translate(ctx):
        raise LookupError("translated")

    create_user = create_user_with(adapters, {"on_error": translate})

    with pytest.raises(LookupError) as exc_info:
        await create_user({"username": ""}, owner_ctx)

    assert isinstance(exc_info.value.__cause__, ValidationError)


@pytest.mark.asyncio
async def test_on_finally_errors_do_not_change_outcome(adapters, owner_ctx):
    def explode(ctx):
        raise RuntimeError("finally failed")

    create_user = create_user_with(adapters, {"on_finally": explode})

    user = await create_user({"username": "owner"}, owner_ctx)

    assert user.username == "owner"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "hooks,raw_input,expected_state",
    [
        ({}, {"username": "owner"}, UseCaseState.completed),
        ({"on_start": lambda ctx: ctx.abort("stop")}, {"username": "owner"}, UseCaseState.aborted),
        ({}, {"username": ""}, UseCaseState.failed),
    ],
)
async def test_on_finally_runs_exactly_once(adapters, owner_ctx, hooks, raw_input, expected_state):
    finals = []
    create_user = create_user_with(
        adapters, {**hooks, "on_finally": lambda ctx: finals.append(ctx.state)}
    )

    try:
        await create_user(raw_input, owner_ctx)
    except Exception:
        pass

    assert finals == [expected_state]


@pytest.mark.asyncio
async def test_anonymous_actor_is_forbidden_through_on_error(adapters, store):
    errors = []
    create_user = create_user_with(adapters, {"on_error": lambda ctx: errors.append(ctx.error)})

    with pytest.raises(ForbiddenError):
        await create_user({"username": "ghost"}, OperationContext())

    assert isinstance(errors[0], ForbiddenError)
    assert store.users.rows == {}


# ----------------------------------------------------------------------------
# Metrics
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_executions_and_hooks_are_reported_to_metrics():
    metrics = RecordingMetrics()
    adapters = build_in_memory_adapters(
        clock=TickingClock(), uuid=SequentialUuid(), metrics=metrics
    )

    def audit(ctx):
        return None

    use_cases = build_use_cases(adapters, ToolkitOptions(hooks={"create_user": {"on_start": audit}}))

    await use_cases.create_user({"username": "owner"}, make_context("ext-owner"))

    assert (
        "use_case.hook",
        {"use_case": "create_user", "point": "on_start", "hook": "audit", "outcome": "ok"},
    ) in metrics.counters
    assert (
        "use_case.execution",
        {"use_case": "create_user", "outcome": "completed"},
    ) in metrics.counters
    assert [name for name, _ in metrics.timings] == ["use_case.hook.duration", "use_case.duration"]


@pytest.mark.asyncio
async def test_failing_metrics_sink_does_not_break_execution(owner_ctx):
    class BrokenMetrics(RecordingMetrics):
        def increment(self, name, tags=None):
            raise RuntimeError("statsd unreachable")

    adapters = build_in_memory_adapters(metrics=BrokenMetrics())
    use_cases = build_use_cases(adapters)

    user = await use_cases.create_user({"username": "owner"}, owner_ctx)

    assert user.username == "owner"
