from typing import Optional

from sqlalchemy import Engine
from starlette.applications import Starlette
from starlette.middleware import Middleware

from ..database.db import create_engine_from_env
from ..database.session import SessionManager
from ..logging_config import setup_logging
from .methods import routes
from .middleware import DatabaseSessionMiddleware


def create_app(engine: Optional[Engine] = None) -> Starlette:
    """
    Build the calendar application.

    The engine is created from DATABASE_URL unless one is given. Run with
    `uvicorn lms_calendar.api.main:create_app --factory`.
    """
    setup_logging()

    if engine is None:
        engine = create_engine_from_env()
    sessions = SessionManager(engine)

    app = Starlette(
        routes=routes,
        middleware=[Middleware(DatabaseSessionMiddleware, session_manager=sessions)],
    )
    app.state.sessions = sessions

    return app
