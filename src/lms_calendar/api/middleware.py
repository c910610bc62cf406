from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette import status

from ..database.session import SessionManager

logger = logging.getLogger(__name__)


class DatabaseSessionMiddleware(BaseHTTPMiddleware):
    """Opens one database session per request in request.state.db_session."""

    def __init__(self, app, *, session_manager: SessionManager):
        super().__init__(app)
        self.session_manager = session_manager

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.scope.get("path", "")
        if path == "/health":
            return await call_next(request)

        try:
            with self.session_manager.with_session() as session:
                request.state.db_session = session
                return await call_next(request)
        except Exception:
            logger.exception("Unhandled exception in DatabaseSessionMiddleware")
            return JSONResponse(
                {"detail": "internal server error"},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
