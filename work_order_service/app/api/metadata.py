from typing import Any, Dict

from fastapi import Request


def route_metadata(request: Request) -> Dict[str, Any]:
    """Request tracing information merged into every response body."""
    return {
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
    }
