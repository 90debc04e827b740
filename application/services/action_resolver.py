# application/services/action_resolver.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from application.services.base_url_resolver import BaseUrlResolver
from application.services.template_renderer import RenderSources, TemplateRenderer
from domain.exceptions import ConfigurationError
from domain.flow import RunActionArgs
from domain.project import CONTENT_TYPE, FORM_DATA, URL_ENCODED, Action, Project


@dataclass(frozen=True)
class ResolvedRequest:
    action: Action
    method: str
    url: str
    headers: Dict[str, str]
    query: Dict[str, str]
    body: Optional[str]


def merge_headers(stored: Dict[str, str], overrides: Dict[str, str]) -> Dict[str, str]:
    """Override headers win; keys compare case-insensitively."""
    merged = dict(stored)
    for key, value in overrides.items():
        for existing in [k for k in merged if k.lower() == key.lower()]:
            del merged[existing]
        merged[key] = value
    return merged


class ActionResolver:
    """
    Stored action + run arguments -> request ready for dispatch.

    Pure: nothing is read from or written to storage here.
    """

    def __init__(self, renderer: TemplateRenderer):
        self._renderer = renderer

    def resolve(
        self,
        action: Action,
        args: RunActionArgs,
        context: Dict[str, str],
        project: Optional[Project] = None,
    ) -> ResolvedRequest:
        if args.form and args.multipart:
            raise ConfigurationError("Cannot send a body both url encoded and as form data")

        overrides = dict(args.headers)
        if args.form:
            overrides[CONTENT_TYPE] = URL_ENCODED
        if args.multipart:
            overrides[CONTENT_TYPE] = FORM_DATA
        headers = merge_headers(action.headers, overrides)

        body = args.body if args.body is not None else action.static_body

        src = RenderSources(context=context, conf=project.conf if project else {})
        base = BaseUrlResolver(project.base_url(args.env) if project else None)

        url = self._renderer.render(action.url, src, where="url")
        return ResolvedRequest(
            action=action,
            method=action.verb,
            url=base.resolve_url(url),
            headers=self._renderer.render_map(headers, src, where="headers"),
            query=self._renderer.render_map(args.query, src, where="query"),
            body=self._renderer.render(body, src, where="body"),
        )
