import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobcook.app.api.errors import kitchen_error_handler
from jobcook.app.api.routes.ingredients import router as ingredients_router
from jobcook.app.api.routes.interview import router as interview_router
from jobcook.app.api.routes.kitchen import router as kitchen_router
from jobcook.app.core.config import configure_logging, get_settings
from jobcook.app.core.errors import KitchenError

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        None

    Returns:
        FastAPI: The configured FastAPI application instance.

    Notes:
        1. Configure logging from settings.
        2. Initialize the FastAPI application with the title "JobCook API".
        3. Add CORS middleware to allow requests from any origin and expose the session header.
        4. Register the handler that turns every KitchenError into one error notification.
        5. Include the ingredients, kitchen and interview routers.
        6. Define a health check endpoint at "/health" that returns a JSON object with status "ok".

    """
    configure_logging(get_settings())

    _msg = "Creating FastAPI application"
    log.debug(_msg)

    app = FastAPI(title="JobCook API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Session-Id"],
    )

    app.add_exception_handler(KitchenError, kitchen_error_handler)

    app.include_router(ingredients_router)
    app.include_router(kitchen_router)
    app.include_router(interview_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    _msg = "FastAPI application created successfully"
    log.debug(_msg)
    return app


app = create_app()
