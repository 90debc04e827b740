"""FastAPI application - REST endpoints over the Workbench"""
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Query, status
from pydantic import BaseModel, Field

import sys

# add the project root to the import path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from application.executor.flow_engine import FlowReport
from application.executor.suite_evaluator import InstanceResult, SuiteReport
from application.outcome import StepOutcome
from application.workbench import Workbench
from domain.exceptions import (
    ConfigurationError,
    NotFoundError,
    ReqflowError,
    SerializationError,
    TransportError,
    ValidationError,
)
from domain.flow import ExtractionSpec, RunActionArgs
from domain.history import HistoryRecord
from domain.project import Action, Project
from infrastructure.bootstrap import build_workbench
from infrastructure.config.settings import load_settings


# request models
class ProjectCreateRequest(BaseModel):
    name: str
    test_url: Optional[str] = None
    prod_url: Optional[str] = None
    conf: Dict[str, str] = Field(default_factory=dict)


class ActionCreateRequest(BaseModel):
    name: str
    verb: str = Field(description="GET, POST, PUT, DELETE or OPTIONS")
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    static_body: Optional[str] = None
    form: bool = False


class RunActionRequest(BaseModel):
    """Per-invocation overrides; the verb always comes from the stored action."""
    project_name: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
    query: Dict[str, str] = Field(default_factory=dict)
    extract: Optional[ExtractionSpec] = Field(default=None, description="pattern -> optional context name")
    env: str = "test"
    form: bool = False
    multipart: bool = False

    def to_args(self, action_name: str) -> RunActionArgs:
        return RunActionArgs(action_name=action_name, **self.model_dump())


class FlowStepRequest(RunActionRequest):
    action_name: str

    def to_step(self) -> RunActionArgs:
        return RunActionArgs.from_dict(self.model_dump())


class FlowSaveRequest(BaseModel):
    steps: List[FlowStepRequest]


# response models
class ActionResponse(BaseModel):
    name: str
    project_name: str
    verb: str
    url: str
    headers: Dict[str, str]
    static_body: Optional[str] = None
    body_example: Optional[str] = None
    response_example: Optional[str] = None


class ProjectResponse(BaseModel):
    name: str
    test_url: Optional[str] = None
    prod_url: Optional[str] = None
    conf: Dict[str, str]
    actions: List[ActionResponse] = Field(default_factory=list)


class StepResponse(BaseModel):
    ok: bool
    action_name: str
    url: Optional[str] = None
    status: Optional[int] = None
    response: Optional[str] = None
    duration: Optional[float] = Field(default=None, description="seconds")
    extracted: Dict[str, Optional[str]] = Field(default_factory=dict)
    bound: Dict[str, str] = Field(default_factory=dict)
    history_id: Optional[int] = None
    history_error: Optional[str] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None


class FlowRunResponse(BaseModel):
    flow_name: str
    state: str
    steps: List[StepResponse]
    context: Dict[str, str]
    failed_step: Optional[int] = None
    abort_reason: Optional[str] = None
    final_extracted: Optional[str] = None


class InstanceResultResponse(BaseModel):
    flow_name: str
    expect: str
    target: str
    passed: bool
    actual: Optional[str] = None
    reason: Optional[str] = None


class SuiteRunResponse(BaseModel):
    suite_name: str
    ok: bool
    passed: List[InstanceResultResponse]
    failed: List[InstanceResultResponse]


class HistoryItemResponse(BaseModel):
    id: Optional[int]
    action_name: str
    url: str
    body: Optional[str] = None
    headers: Dict[str, str]
    response: Optional[str] = None
    status_code: int
    duration: float
    timestamp: Optional[datetime] = None


class ContextResponse(BaseModel):
    values: Dict[str, str]
    version: int


# FastAPI application
app = FastAPI(
    title="reqflow",
    description="Reusable HTTP actions, flows and test suites",
    version="1.0.0",
)

WORKBENCH: Optional[Workbench] = None


def get_workbench() -> Workbench:
    global WORKBENCH
    if WORKBENCH is None:
        WORKBENCH = build_workbench(load_settings())
    return WORKBENCH


def _to_http_exception(e: ReqflowError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, (ConfigurationError, SerializationError, ValidationError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, TransportError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


def _action_response(action: Action) -> ActionResponse:
    return ActionResponse(
        name=action.name,
        project_name=action.project_name,
        verb=action.verb,
        url=action.url,
        headers=action.headers,
        static_body=action.static_body,
        body_example=action.body_example,
        response_example=action.response_example,
    )


def _project_response(project: Project, actions: List[Action]) -> ProjectResponse:
    return ProjectResponse(
        name=project.name,
        test_url=project.test_url,
        prod_url=project.prod_url,
        conf=project.conf,
        actions=[_action_response(a) for a in actions],
    )


def _step_response(outcome: StepOutcome) -> StepResponse:
    return StepResponse(
        ok=outcome.ok,
        action_name=outcome.action_name,
        url=outcome.url,
        status=outcome.status,
        response=outcome.response,
        duration=outcome.fetch_result.duration if outcome.fetch_result else None,
        extracted=outcome.extracted,
        bound=outcome.bound,
        history_id=outcome.history_id,
        history_error=outcome.history_error,
        error_kind=outcome.error_kind,
        error=outcome.error_message,
    )


def _flow_response(report: FlowReport) -> FlowRunResponse:
    return FlowRunResponse(
        flow_name=report.flow_name,
        state=report.state.value,
        steps=[_step_response(s) for s in report.steps],
        context=report.context,
        failed_step=report.failed_step,
        abort_reason=report.abort_reason,
        final_extracted=report.final_extracted,
    )


def _instance_response(result: InstanceResult) -> InstanceResultResponse:
    return InstanceResultResponse(**result.__dict__)


def _suite_response(report: SuiteReport) -> SuiteRunResponse:
    return SuiteRunResponse(
        suite_name=report.suite_name,
        ok=report.ok,
        passed=[_instance_response(r) for r in report.passed],
        failed=[_instance_response(r) for r in report.failed],
    )


def _history_response(record: HistoryRecord) -> HistoryItemResponse:
    return HistoryItemResponse(**record.__dict__)


@app.get("/")
def read_root():
    """Health check"""
    return {"status": "ok", "service": "reqflow"}


@app.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(request: ProjectCreateRequest = Body(...)) -> ProjectResponse:
    try:
        project = get_workbench().create_project(
            name=request.name,
            test_url=request.test_url,
            prod_url=request.prod_url,
            conf=request.conf,
        )
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return _project_response(project, [])


@app.get("/projects/{name}", response_model=ProjectResponse)
def get_project(name: str) -> ProjectResponse:
    try:
        info = get_workbench().project_info(name)
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return _project_response(info.project, info.actions)


@app.put("/projects/{name}/conf", response_model=ProjectResponse)
def update_project_conf(name: str, conf: Dict[str, str] = Body(...)) -> ProjectResponse:
    try:
        workbench = get_workbench()
        project = workbench.update_project_conf(name, conf)
        actions = workbench.list_actions(name)
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return _project_response(project, actions)


@app.post("/projects/{name}/actions", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
def add_action(name: str, request: ActionCreateRequest = Body(...)) -> ActionResponse:
    try:
        action = get_workbench().add_action(
            project_name=name,
            name=request.name,
            verb=request.verb,
            url=request.url,
            headers=request.headers,
            static_body=request.static_body,
            form=request.form,
        )
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return _action_response(action)


@app.post("/actions/{name}/runs", response_model=StepResponse)
def run_action(name: str, request: Optional[RunActionRequest] = Body(default=None)) -> StepResponse:
    """
    Run one action. A response with status >= 400 is still a 200 here:
    check `ok` and `status` in the body.
    """
    overrides = (request or RunActionRequest()).to_args(name)
    try:
        outcome = get_workbench().run_action(name, overrides)
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return _step_response(outcome)


@app.post("/flows/{name}", status_code=status.HTTP_201_CREATED)
def save_flow(name: str, request: FlowSaveRequest = Body(...)) -> Dict[str, object]:
    try:
        flow = get_workbench().save_flow(name, [s.to_step() for s in request.steps])
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return {"name": flow.name, "steps": len(flow.steps)}


@app.post("/flows/{name}/runs", response_model=FlowRunResponse)
def run_flow(
    name: str,
    continue_on_error: Optional[bool] = Query(default=None),
) -> FlowRunResponse:
    try:
        report = get_workbench().run_flow(name, continue_on_error=continue_on_error)
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return _flow_response(report)


@app.post("/test-suites/{name}/runs", response_model=SuiteRunResponse)
def run_test_suite(name: str) -> SuiteRunResponse:
    try:
        report = get_workbench().run_test_suite(name)
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return _suite_response(report)


@app.get("/history", response_model=List[HistoryItemResponse])
def list_history(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
) -> List[HistoryItemResponse]:
    try:
        records = get_workbench().list_history(page, page_size)
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return [_history_response(r) for r in records]


@app.get("/context", response_model=ContextResponse)
def get_context() -> ContextResponse:
    try:
        ctx = get_workbench().current_context()
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return ContextResponse(values=ctx.values, version=ctx.version)


@app.delete("/context", response_model=ContextResponse)
def clear_context() -> ContextResponse:
    try:
        ctx = get_workbench().clear_context()
    except ReqflowError as e:
        raise _to_http_exception(e) from e
    return ContextResponse(values=ctx.values, version=ctx.version)
