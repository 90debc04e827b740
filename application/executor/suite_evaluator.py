# application/executor/suite_evaluator.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from application.executor.flow_engine import FlowEngine, FlowReport
from application.ports.storage import StoragePort
from application.services.execution_deps import ExecutionDeps
from domain.exceptions import ReqflowError
from domain.test_suite import TARGET_RESPONSE, TestSuiteInstance


@dataclass(frozen=True)
class InstanceResult:
    flow_name: str
    expect: str
    target: str
    passed: bool
    actual: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class SuiteReport:
    suite_name: str
    passed: List[InstanceResult] = field(default_factory=list)
    failed: List[InstanceResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class SuiteEvaluator:
    """Every instance is evaluated, in declaration order, whatever the earlier ones did."""

    def __init__(self, storage: StoragePort, flow_engine: FlowEngine):
        self._storage = storage
        self._flows = flow_engine

    def evaluate(self, suite_name: str, deps: ExecutionDeps) -> SuiteReport:
        suite = self._storage.get_test_suite(suite_name)
        instances = self._storage.list_test_suite_instances(suite.name)
        deps = deps.with_logger(deps.logger.bind(suite=suite.name))
        deps.logger.info("suite.start", instances=len(instances))

        passed: List[InstanceResult] = []
        failed: List[InstanceResult] = []
        for instance in instances:
            result = self._evaluate_instance(instance, deps)
            (passed if result.passed else failed).append(result)
            deps.logger.info(
                "suite.instance.end",
                flow=instance.flow_name,
                passed=result.passed,
                reason=result.reason,
            )

        deps.logger.info("suite.end", passed=len(passed), failed=len(failed))
        return SuiteReport(suite_name=suite.name, passed=passed, failed=failed)

    def _evaluate_instance(self, instance: TestSuiteInstance, deps: ExecutionDeps) -> InstanceResult:
        try:
            flow = self._storage.get_flow(instance.flow_name)
            report = self._flows.execute(flow, deps)
        except ReqflowError as e:
            deps.logger.error("suite.instance_failed", flow=instance.flow_name, error=str(e))
            return self._result(instance, passed=False, reason=str(e))

        if not report.ok:
            return self._result(instance, passed=False, reason=report.abort_reason)

        actual = self._observable(instance, report)
        if actual is None:
            return self._result(instance, passed=False, reason=f"flow produced no {instance.target} value")
        if actual != instance.expect:
            return self._result(
                instance,
                passed=False,
                actual=actual,
                reason=f"expected {instance.expect!r}, got {actual!r}",
            )
        return self._result(instance, passed=True, actual=actual)

    def _observable(self, instance: TestSuiteInstance, report: FlowReport) -> Optional[str]:
        if instance.target == TARGET_RESPONSE:
            return report.final_response
        return report.final_extracted

    def _result(
        self,
        instance: TestSuiteInstance,
        passed: bool,
        actual: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> InstanceResult:
        return InstanceResult(
            flow_name=instance.flow_name,
            expect=instance.expect,
            target=instance.target,
            passed=passed,
            actual=actual,
            reason=reason,
        )
