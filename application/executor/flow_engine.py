# application/executor/flow_engine.py
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from application.executor.action_runner import ActionRunner
from application.outcome import KIND_APPLICATION, KIND_TRANSPORT, StepOutcome
from application.services.context_store import ContextStore
from application.services.execution_deps import ExecutionDeps
from domain.exceptions import ReqflowError
from domain.flow import Flow, FlowState, RunActionArgs

# failures that may be skipped with continue_on_error; everything else aborts
RECOVERABLE_KINDS = (KIND_APPLICATION, KIND_TRANSPORT)


@dataclass(frozen=True)
class FlowReport:
    flow_name: str
    state: FlowState
    steps: List[StepOutcome] = field(default_factory=list)
    context: Dict[str, str] = field(default_factory=dict)
    failed_step: Optional[int] = None
    abort_reason: Optional[str] = None
    context_version: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.state == FlowState.COMPLETED

    @property
    def final_extracted(self) -> Optional[str]:
        """Last value extracted during the run, in step then pattern order."""
        last: Optional[str] = None
        for step in self.steps:
            for value in step.extracted.values():
                if value is not None:
                    last = value
        return last

    @property
    def final_response(self) -> Optional[str]:
        for step in reversed(self.steps):
            if step.fetch_result is not None:
                return step.fetch_result.response
        return None


class FlowEngine:
    """
    Runs the steps of a flow in order against one in-memory context.

    The context is loaded once before the first step and saved once after
    the last one. An aborted flow does not save it.
    """

    def __init__(
        self,
        runner: ActionRunner,
        context_store: ContextStore,
        continue_on_error: bool = False,
        check_context_version: bool = False,
    ):
        self._runner = runner
        self._context_store = context_store
        self._continue_on_error = continue_on_error
        self._check_context_version = check_context_version

    def execute(self, flow: Flow, deps: ExecutionDeps, continue_on_error: Optional[bool] = None) -> FlowReport:
        keep_going = self._continue_on_error if continue_on_error is None else continue_on_error
        deps = deps.with_logger(deps.logger.bind(run_id=uuid.uuid4().hex, flow=flow.name))

        state = FlowState.PENDING
        current = self._context_store.load_current()
        ctx = dict(current.values)
        steps: List[StepOutcome] = []

        deps.logger.info("flow.start", steps=len(flow.steps), continue_on_error=keep_going)
        state = FlowState.RUNNING

        for i, args in enumerate(flow.steps):
            deps.logger.info("flow.step.start", step_index=i, action=args.action_name, state=state.value)
            t0 = time.perf_counter()

            outcome = self._run_step(args, ctx, deps)
            steps.append(outcome)

            deps.logger.info(
                "flow.step.end",
                step_index=i,
                ok=outcome.ok,
                status=outcome.status,
                elapsed_ms=int((time.perf_counter() - t0) * 1000),
            )

            if outcome.ok:
                continue

            if keep_going and outcome.error_kind in RECOVERABLE_KINDS:
                deps.logger.warning("flow.step.skipped", step_index=i, error=outcome.error_message)
                continue

            state = FlowState.ABORTED
            deps.logger.error("flow.aborted", step_index=i, error_kind=outcome.error_kind, error=outcome.error_message)
            return FlowReport(
                flow_name=flow.name,
                state=state,
                steps=steps,
                context=ctx,
                failed_step=i,
                abort_reason=f"step {i} ({args.action_name}): {outcome.error_message}",
            )

        expected = current.version if self._check_context_version else None
        saved = self._context_store.save(ctx, expected_version=expected)
        state = FlowState.COMPLETED
        deps.logger.info("flow.end", state=state.value, context_version=saved.version)

        return FlowReport(
            flow_name=flow.name,
            state=state,
            steps=steps,
            context=dict(saved.values),
            context_version=saved.version,
        )

    def _run_step(self, args: RunActionArgs, ctx: Dict[str, str], deps: ExecutionDeps) -> StepOutcome:
        try:
            return self._runner.run(args, ctx, deps)
        except ReqflowError as e:
            deps.logger.error("flow.step_failed", action=args.action_name, error=str(e))
            return StepOutcome.from_error(args.action_name, e)
