"""
Sentry instrumentation for the geo service.
Strips credentials from request headers, breadcrumbs, span data and the
Ticketmaster apikey query param.

The httpx integration records outbound query strings under "http.query"
(breadcrumbs and span data), separately from "url".
"""

from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from services.geo.config import settings

SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie"}
SENSITIVE_PARAMS = ("apikey=",)
FILTERED = "[FILTERED]"


def _scrub_headers(headers: Any) -> None:
    if isinstance(headers, dict):
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = FILTERED


def _scrub_query(query: Any) -> Any:
    if not isinstance(query, str) or not query:
        return query
    return "&".join(
        f"{p.split('=', 1)[0]}={FILTERED}" if p.lower().startswith(SENSITIVE_PARAMS) else p
        for p in query.split("&")
    )


def _scrub_url(url: Any) -> Any:
    if not isinstance(url, str) or "?" not in url:
        return url
    base, _, query = url.partition("?")
    return f"{base}?{_scrub_query(query)}"


def _scrub_http_data(data: Any) -> None:
    """Breadcrumb/span data: headers, url and http.query."""
    if not isinstance(data, dict):
        return
    _scrub_headers(data.get("headers"))
    if "url" in data:
        data["url"] = _scrub_url(data["url"])
    if "http.query" in data:
        data["http.query"] = _scrub_query(data["http.query"])


def _strip_sensitive_data(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """before_send hook: filter auth headers, cookies and upstream API keys."""
    for breadcrumb in event.get("breadcrumbs", {}).get("values", []):
        _scrub_http_data(breadcrumb.get("data"))

    request = event.get("request", {})
    if isinstance(request, dict):
        _scrub_headers(request.get("headers"))
        if isinstance(request.get("query_string"), str):
            request["query_string"] = _scrub_query(request["query_string"])
    return event


def _strip_sensitive_transaction(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """before_send_transaction hook: the same filtering plus every span."""
    for span in event.get("spans", []):
        _scrub_http_data(span.get("data"))
        if "description" in span:
            span["description"] = _scrub_url(span["description"])
    return _strip_sensitive_data(event, hint)


def setup_sentry() -> None:
    if not settings.sentry_dsn:
        return

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"{settings.app_name}@{settings.app_version}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
        before_send=_strip_sensitive_data,
        before_send_transaction=_strip_sensitive_transaction,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        send_default_pii=False,
    )
