import os
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from lms.core.capabilities import FULL_CAPABILITIES, SchemaCapabilities, resolve_capabilities
from lms.core.config import settings
from lms.core.database import Database
from lms.core.logging import configure_logging
from lms.core.scheduler import start_scheduler, stop_scheduler
from lms.endpoints import admin, course, progress
from lms.middleware.exceptions import global_exception_handler, http_exception_handler, validation_exception_handler
from lms.middleware.logging import RequestLoggingMiddleware
import lms.models.registry  # noqa: F401


def create_app(database: Optional[Database] = None, capabilities: Optional[SchemaCapabilities] = None) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json"
    )
    owns_database = database is None
    app.state.database = database or Database(settings.DATABASE_URL)
    app.state.capabilities = capabilities
    app.state.scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(progress.router, prefix="/progress", tags=["Progress"])
    app.include_router(course.router, prefix="/courses", tags=["Courses"])
    app.include_router(admin.router, prefix="/admin", tags=["Admin"])

    @app.on_event("startup")
    async def startup_event():
        if os.getenv("TESTING") != "true":
            configure_logging()
        if app.state.capabilities is None:
            if settings.SCHEMA_AUTODETECT:
                app.state.capabilities = resolve_capabilities(app.state.database.engine)
            else:
                app.state.capabilities = FULL_CAPABILITIES
        app.state.scheduler = start_scheduler(app.state.database, app.state.capabilities)

    @app.on_event("shutdown")
    async def shutdown_event():
        stop_scheduler(app.state.scheduler)
        if owns_database:
            app.state.database.dispose()

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
