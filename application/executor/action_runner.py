# application/executor/action_runner.py
from __future__ import annotations

from typing import Dict, Optional, Tuple

from application.outcome import StepOutcome, error_kind
from application.ports.http_client import FetchResult, HttpClientPort
from application.ports.storage import StoragePort
from application.services.action_resolver import ActionResolver, ResolvedRequest
from application.services.body_encoder import BodyEncoder
from application.services.execution_deps import ExecutionDeps
from application.services.extractor import Extractor
from application.services.history_recorder import HistoryRecorder
from application.services.redactor import mask_dict
from domain.exceptions import ApplicationError, StorageError
from domain.flow import RunActionArgs


class ActionRunner:
    """
    Runs one action: resolve, encode, dispatch, record, extract.

    Failures before a response exists (configuration, serialization,
    transport, missing action) are raised. Once a response exists an outcome
    is always returned; status >= 400 gives ok=False without extraction.
    The given context dict receives newly bound values in place.
    """

    def __init__(
        self,
        storage: StoragePort,
        http_client: HttpClientPort,
        resolver: ActionResolver,
        encoder: BodyEncoder,
        recorder: HistoryRecorder,
        extractor: Extractor,
    ):
        self._storage = storage
        self._http = http_client
        self._resolver = resolver
        self._encoder = encoder
        self._recorder = recorder
        self._extractor = extractor

    def run(self, args: RunActionArgs, context: Dict[str, str], deps: ExecutionDeps) -> StepOutcome:
        action = self._storage.get_action(args.action_name, args.project_name)
        project = self._storage.get_project(action.project_name)

        resolved = self._resolver.resolve(action, args, context, project)
        encoded = self._encoder.encode(resolved.headers, resolved.body)

        deps.logger.info(
            "http.request",
            action=action.name,
            project=action.project_name,
            method=resolved.method,
            url=resolved.url,
            query=resolved.query,
            headers=mask_dict(encoded.headers),
            body_kind=encoded.body.kind,
        )

        fetch = self._http.request(
            method=resolved.method,
            url=resolved.url,
            headers=encoded.headers,
            params=resolved.query,
            body=encoded.body,
        )

        deps.logger.info(
            "http.response",
            action=action.name,
            status=fetch.status,
            elapsed_ms=int(fetch.duration * 1000),
            body_len=len(fetch.response),
        )

        history_id, history_error = self._record(resolved, fetch, deps)

        if fetch.status >= 400:
            deps.printer.info(f"Status code: {fetch.status}")
            deps.printer.response(fetch.response)
            failure = ApplicationError(fetch.status, fetch.response)
            return StepOutcome(
                ok=False,
                action_name=action.name,
                url=resolved.url,
                fetch_result=fetch,
                history_id=history_id,
                history_error=history_error,
                error_kind=error_kind(failure),
                error_message=str(failure),
            )

        deps.printer.info(f"Status code: {fetch.status}")
        self._update_examples(resolved, fetch, deps)

        extracted: Dict[str, Optional[str]] = {}
        bound: Dict[str, str] = {}
        if args.extract is not None:
            extracted, bound = self._extract(args, fetch.response, deps)
            context.update(bound)
        else:
            deps.printer.response(fetch.response)
            deps.printer.to_clipboard(fetch.response)

        return StepOutcome(
            ok=True,
            action_name=action.name,
            url=resolved.url,
            fetch_result=fetch,
            extracted=extracted,
            bound=bound,
            history_id=history_id,
            history_error=history_error,
        )

    def _record(
        self, resolved: ResolvedRequest, fetch: FetchResult, deps: ExecutionDeps
    ) -> Tuple[Optional[int], Optional[str]]:
        try:
            record = self._recorder.record(
                action_name=resolved.action.name,
                url=resolved.url,
                headers=resolved.headers,
                body=resolved.body,
                fetch_result=fetch,
            )
        except StorageError as e:
            # the response has already been received; report and keep going
            deps.logger.error("history.write_failed", action=resolved.action.name, error=str(e))
            deps.printer.info(f"Could not save history: {e}")
            return None, str(e)
        return record.id, None

    def _update_examples(self, resolved: ResolvedRequest, fetch: FetchResult, deps: ExecutionDeps) -> None:
        try:
            self._storage.upsert_action(resolved.action.with_examples(resolved.body, fetch.response))
        except StorageError as e:
            deps.logger.warning("action.example_update_failed", action=resolved.action.name, error=str(e))

    def _extract(
        self, args: RunActionArgs, response: str, deps: ExecutionDeps
    ) -> Tuple[Dict[str, Optional[str]], Dict[str, str]]:
        spec = args.extract or {}
        extracted = self._extractor.extract_all(response, spec)
        bound: Dict[str, str] = {}

        for pattern, value in extracted.items():
            name = spec.get(pattern)
            if value is None:
                deps.logger.debug("extract.not_found", action=args.action_name, pattern=pattern)
                continue
            suffix = f" saved as {name}" if name else ""
            deps.printer.info(f"Extraction of {pattern}: {value}{suffix}")
            if name:
                bound[name] = value

        deps.logger.info("extract.done", action=args.action_name, patterns=len(spec), bound=sorted(bound))

        concat = "\n".join(v for v in extracted.values() if v is not None)
        deps.printer.to_clipboard(concat)
        deps.printer.extracted(concat)
        return extracted, bound
