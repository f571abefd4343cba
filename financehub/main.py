import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from financehub.config import Settings
from financehub.data.base import create_db_engine, create_session_factory, create_tables
from financehub.data.repositories.category_repository import seed_system_categories
from financehub.domain.services.auth_service import initialize_admin
from financehub.logging_config import configure_logging
from financehub.presentation.auth_api import router as auth_router
from financehub.presentation.budget_api import router as budget_router
from financehub.presentation.category_api import router as category_router
from financehub.presentation.errors import register_exception_handlers
from financehub.presentation.recurring_transaction_api import (
    router as recurring_transaction_router,
)
from financehub.presentation.transaction_api import router as transaction_router
from financehub.presentation.user_api import router as user_router

log = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application with its own engine and session factory.

    Run with: uvicorn financehub.main:create_app --factory
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    engine = create_db_engine(settings.database_url)
    create_tables(engine)
    session_factory = create_session_factory(engine)

    db = session_factory()
    try:
        if settings.seed_system_categories:
            added = seed_system_categories(db)
            log.info("system_categories_seeded", added=added)
        initialize_admin(db, settings)
    finally:
        db.close()

    app = FastAPI(title="FinanceHub API", version="1.0.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(category_router)
    app.include_router(transaction_router)
    app.include_router(budget_router)
    app.include_router(recurring_transaction_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    log.info("app_created", database=engine.url.render_as_string(hide_password=True))
    return app
