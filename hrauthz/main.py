from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from hrauthz.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from hrauthz.db.init_db import init_db
from hrauthz.logging_config import configure_app_logging
from hrauthz.routers import departments, employees, health, tasks
from hrauthz.security.config import load_security_config
from hrauthz.security.dependencies import enforce_security
from hrauthz.security.guard import DashboardGuardMiddleware
from hrauthz.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        config_path = settings.security_config_path
        app.state.security_config = load_security_config(config_path)
        logger.info("Loaded security config: %s", config_path)

        # Built once; read-only for the life of the process.
        app.state.access_policy = app.state.security_config.build_access_policy()
        logger.info(
            "Access policy ready roles=%s",
            sorted(r.value for r in app.state.access_policy.roles),
        )

        init_db(seed=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured + seed if needed)")

        yield

    # Global dependency: permission + scope decisions with zero changes to route handlers.
    app = FastAPI(dependencies=[Depends(enforce_security)], lifespan=lifespan)
    app.add_middleware(DashboardGuardMiddleware)

    app.include_router(health.router)
    app.include_router(employees.router)
    app.include_router(departments.router)
    app.include_router(tasks.router)

    return app


app = create_app()
