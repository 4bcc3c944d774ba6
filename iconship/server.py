"""
HTTP trigger for the publishing pipeline.

A FastAPI application with a single endpoint:
- POST /publish - run the pipeline for a project and report its outcome
"""

from typing import Any, Callable, Dict, Optional

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from iconship import __version__
from iconship.core.config import get_config_value
from iconship.core.error_handler import ConfigurationError, ValidationError, to_error_info
from iconship.core.logging_config import get_logger
from iconship.pipeline.pipeline_runner import PipelineRunner
from iconship.pipeline.request_validator import RequestValidator
from iconship.pipeline.run_config import RunConfig

logger = get_logger(__name__)


def default_runner_factory() -> PipelineRunner:
    """Build a runner from the configuration, once per request."""
    return PipelineRunner.from_run_config(RunConfig.from_config())


def create_app(
    runner_factory: Optional[Callable[[], PipelineRunner]] = None,
    cors_origins: Optional[list] = None
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        runner_factory: Returns the PipelineRunner for a request. Defaults to
            one built from the configuration and ICONSHIP_FEED_TOKEN.
        cors_origins: Allowed CORS origins (default: server.cors_origins).

    Returns:
        FastAPI: The application
    """
    runner_factory = runner_factory or default_runner_factory
    validator = RequestValidator()

    app = FastAPI(
        title="iconship",
        description="Publishes icon sets as React component packages",
        version=__version__
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or get_config_value("server.cors_origins", ["*"]),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/publish")
    def publish(payload: Dict[str, Any] = Body(...)):
        """Run the pipeline for the project named in the request body."""
        try:
            request = validator.validate_publish_request(payload)
        except ValidationError as e:
            return JSONResponse(status_code=400, content={"error": to_error_info(e).to_dict()})

        try:
            runner = runner_factory()
        except ConfigurationError as e:
            logger.error(f"Cannot start pipeline: {e}")
            return JSONResponse(status_code=500, content={"error": to_error_info(e).to_dict()})

        result = runner.run(request)

        if not result.succeeded:
            return JSONResponse(status_code=500, content={"error": result.error.to_dict()})

        return {
            "message": result.message,
            "package": result.package_name,
            "version": result.version,
            "assets": result.asset_count,
        }

    return app
