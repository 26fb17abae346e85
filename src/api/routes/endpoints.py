"""API index: service banner and the list of registered routes."""

import logging
from collections import defaultdict

from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["meta"])

API_MESSAGE = "Project Nexus API - Customer Service Dashboard"

# Tags to exclude from the listing (internal/docs)
EXCLUDED_TAGS = {"meta"}
EXCLUDED_PATHS = {"/docs", "/docs/oauth2-redirect", "/openapi.json", "/redoc"}


def group_endpoints_by_tag(endpoints: list[dict]) -> dict[str, list[dict]]:
    """
    Group endpoints by their first tag.

    Args:
        endpoints: List of endpoint dicts with keys: method, path, summary, tags
                   Example: {"method": "POST", "path": "/api/auth/login", "summary": "...", "tags": ["auth"]}

    Returns:
        Dictionary mapping tag name to list of endpoints, each sorted by (path, method).
        Untagged endpoints go under "other"; tags in EXCLUDED_TAGS are dropped.
    """
    mapping = defaultdict(list)

    for ep in endpoints:
        tag = ep["tags"][0] if ep["tags"] else "other"
        if tag not in EXCLUDED_TAGS:
            mapping[tag].append(ep)

    for tag in mapping:
        mapping[tag].sort(key=lambda ep: (ep["path"], ep["method"]))

    return dict(mapping)


def collect_endpoints(routes) -> list[dict]:
    """Flatten app routes into one entry per (method, path)."""
    endpoints = []
    for route in routes:
        if not (hasattr(route, 'methods') and hasattr(route, 'path')):
            continue
        if route.path in EXCLUDED_PATHS:
            continue

        summary = getattr(route, 'description', '') or getattr(route, 'summary', '') or ''
        for method in sorted(m for m in route.methods if m != 'HEAD'):
            endpoints.append({
                'method': method,
                'path': route.path,
                # First docstring line only
                'summary': summary.split("\n")[0].strip(),
                'tags': list(getattr(route, 'tags', []) or []),
            })
    return endpoints


@router.get("/api")
async def api_index(request: Request):
    """Describe the API and list its routes grouped by tag."""
    app = request.app
    routes = group_endpoints_by_tag(collect_endpoints(app.routes))

    return {
        "message": API_MESSAGE,
        "version": app.version,
        "endpoints": {
            "health": "/health",
            "api": "/api",
            "auth": "/api/auth",
        },
        "routes": {
            tag: [{"method": ep["method"], "path": ep["path"], "summary": ep["summary"]} for ep in eps]
            for tag, eps in sorted(routes.items())
        },
    }
