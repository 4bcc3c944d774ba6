"""
Error handling module.

This module provides the exception types raised by the pipeline stages,
helpers for making HTTP requests with consistent error reporting, and the
conversion of exceptions into the ErrorInfo reported to callers.
"""

import time
import logging
import traceback
from typing import Dict, Any, Optional, Callable

import requests

from iconship.core.models import ErrorInfo

logger = logging.getLogger(__name__)

class APIError(Exception):
    """
    Exception raised for API errors.

    Attributes:
        message: Error message.
        status_code: HTTP status code.
        response: API response.
        endpoint: API endpoint.
        request_data: Request data.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
        endpoint: Optional[str] = None,
        request_data: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        self.endpoint = endpoint
        self.request_data = request_data

        detailed_message = f"API Error: {message}"
        if status_code:
            detailed_message += f" (Status Code: {status_code})"
        if endpoint:
            detailed_message += f" (Endpoint: {endpoint})"

        super().__init__(detailed_message)


class ValidationError(Exception):
    """
    Exception raised for validation errors.

    Attributes:
        message: Error message.
        field: Field that failed validation.
        value: Value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None
    ):
        self.message = message
        self.field = field
        self.value = value

        detailed_message = f"Validation Error: {message}"
        if field:
            detailed_message += f" (Field: {field})"

        super().__init__(detailed_message)


class ConfigurationError(Exception):
    """
    Exception raised for configuration errors.

    Attributes:
        message: Error message.
        component: Component that has a configuration error.
        missing_keys: Keys that are missing from the configuration.
    """

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        missing_keys: Optional[list] = None
    ):
        self.message = message
        self.component = component
        self.missing_keys = missing_keys or []

        detailed_message = f"Configuration Error: {message}"
        if component:
            detailed_message += f" (Component: {component})"
        if missing_keys:
            detailed_message += f" (Missing Keys: {', '.join(missing_keys)})"

        super().__init__(detailed_message)


class PipelineError(Exception):
    """
    Base class for failures of a pipeline stage.

    Attributes:
        message: Error message.
        stage: Pipeline stage that failed (fetch, generate, assemble, publish, cleanup).
        cause: The underlying exception, if any.
    """

    stage = "pipeline"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class FetchError(PipelineError):
    """The icon service listing or an image retrieval failed."""

    stage = "fetch"


class GenerationError(PipelineError):
    """
    Component generation failed for an asset.

    Attributes:
        asset_name: Name of the asset being generated, if known.
    """

    stage = "generate"

    def __init__(self, message: str, asset_name: Optional[str] = None, cause: Optional[BaseException] = None):
        self.asset_name = asset_name
        super().__init__(message, cause)


class AssemblyError(PipelineError):
    """
    Writing the package layout or creating the archive failed.

    Attributes:
        layout: The partially created PackageLayout, so it can still be cleaned up.
    """

    stage = "assemble"

    def __init__(self, message: str, layout: Optional[Any] = None, cause: Optional[BaseException] = None):
        self.layout = layout
        super().__init__(message, cause)


class PublishError(PipelineError):
    """The artifact feed rejected or did not accept the upload."""

    stage = "publish"


class CleanupError(PipelineError):
    """
    Removing the archive or the output root failed.

    Attributes:
        paths: Paths that could not be removed.
    """

    stage = "cleanup"

    def __init__(self, message: str, paths: Optional[list] = None, cause: Optional[BaseException] = None):
        self.paths = paths or []
        super().__init__(message, cause)


def to_error_info(error: BaseException) -> ErrorInfo:
    """
    Convert an exception into the ErrorInfo reported to callers.

    The classification is the exception class name. Stack traces are never
    included; they belong in the log.

    Args:
        error: Exception to convert.

    Returns:
        ErrorInfo describing the error.
    """
    message = getattr(error, "message", None) or str(error)
    details = {}

    stage = getattr(error, "stage", None)
    if stage:
        details["stage"] = stage

    if isinstance(error, GenerationError) and error.asset_name:
        details["asset_name"] = error.asset_name

    if isinstance(error, CleanupError) and error.paths:
        details["paths"] = list(error.paths)

    return ErrorInfo(
        classification=type(error).__name__,
        message=message,
        details=details
    )


def handle_api_request(
    request_func: Callable,
    endpoint: str,
    error_message: str = "API request failed",
    response_type: str = "json",
    **request_kwargs
) -> Any:
    """
    Handle an API request with error handling.

    Args:
        request_func: Function to make the API request (e.g. session.get).
        endpoint: API endpoint.
        error_message: Error message to use if the request fails.
        response_type: "json" to parse the body as JSON, "text" for the raw text.
        **request_kwargs: Keyword arguments passed to request_func
            (json, params, headers, timeout, ...).

    Returns:
        Parsed JSON or response text.

    Raises:
        APIError: If the API request fails.
    """
    request_data = request_kwargs.get("json") or request_kwargs.get("params")
    response = None

    try:
        response = request_func(endpoint, **request_kwargs)
        response.raise_for_status()

    except requests.exceptions.HTTPError as e:
        if getattr(e, "response", None) is not None:
            status_code = e.response.status_code
            response_text = e.response.text
        else:
            status_code = getattr(response, "status_code", None)
            response_text = getattr(response, "text", str(e))

        logger.error(f"HTTP error: {e}")
        logger.error(f"Response: {response_text}")

        raise APIError(
            message=f"{error_message}: {e}",
            status_code=status_code,
            response=response_text,
            endpoint=endpoint,
            request_data=request_data
        )

    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error: {e}")

        raise APIError(
            message=f"{error_message}: Connection error",
            endpoint=endpoint,
            request_data=request_data
        )

    except requests.exceptions.Timeout as e:
        logger.error(f"Timeout error: {e}")

        raise APIError(
            message=f"{error_message}: Request timed out",
            endpoint=endpoint,
            request_data=request_data
        )

    except requests.exceptions.RequestException as e:
        logger.error(f"Request error: {e}")

        raise APIError(
            message=f"{error_message}: {e}",
            endpoint=endpoint,
            request_data=request_data
        )

    if response_type == "text":
        return response.text

    try:
        return response.json()
    except ValueError as e:
        logger.error(f"Failed to parse API response: {e}")

        raise APIError(
            message=f"Failed to parse API response: {e}",
            status_code=getattr(response, "status_code", None),
            response=getattr(response, "text", None),
            endpoint=endpoint,
            request_data=request_data
        )


def log_api_error(error: APIError) -> None:
    """
    Log an API error with detailed information.

    Args:
        error: API error to log.
    """
    logger.error(f"API Error: {error.message}")

    if error.status_code:
        logger.error(f"Status Code: {error.status_code}")

    if error.endpoint:
        logger.error(f"Endpoint: {error.endpoint}")

    if error.request_data and isinstance(error.request_data, dict):
        safe_request_data = error.request_data.copy()

        for key in safe_request_data:
            if "key" in key.lower() or "token" in key.lower() or "secret" in key.lower() or "password" in key.lower():
                safe_request_data[key] = "***REDACTED***"

        logger.error(f"Request Data: {safe_request_data}")


def retry_api_request(
    request_func: Callable,
    endpoint: str,
    error_message: str = "API request failed",
    response_type: str = "json",
    max_retries: int = 3,
    retry_delay: float = 1,
    **request_kwargs
) -> Any:
    """
    Retry an API request with exponential backoff.

    Client errors (4xx) are not retried.

    Args:
        request_func: Function to make the API request.
        endpoint: API endpoint.
        error_message: Error message to use if the request fails.
        response_type: "json" or "text", see handle_api_request.
        max_retries: Maximum number of attempts.
        retry_delay: Initial delay between retries in seconds.
        **request_kwargs: Keyword arguments passed to request_func.

    Returns:
        Parsed JSON or response text.

    Raises:
        APIError: If the API request fails after all retries.
    """
    retries = 0

    while True:
        try:
            return handle_api_request(
                request_func,
                endpoint,
                error_message=error_message,
                response_type=response_type,
                **request_kwargs
            )
        except APIError as e:
            # Don't retry client errors (4xx)
            if e.status_code and 400 <= e.status_code < 500:
                logger.warning(f"Client error, not retrying: {e}")
                raise

            retries += 1

            if retries >= max_retries:
                logger.error(f"API request failed after {max_retries} attempts")
                raise

            delay = retry_delay * (2 ** (retries - 1))
            logger.warning(f"API request failed, retrying in {delay} seconds (attempt {retries}/{max_retries})")
            time.sleep(delay)


def log_pipeline_error(error: BaseException) -> None:
    """
    Log a stage failure with its stack trace.

    Args:
        error: The exception that aborted the run.
    """
    stage = getattr(error, "stage", "unknown")
    logger.error(f"Pipeline failed at stage '{stage}': {error}")

    cause = getattr(error, "cause", None)
    if cause is not None:
        logger.error(f"Caused by: {type(cause).__name__}: {cause}")

    logger.debug("".join(traceback.format_exception(type(error), error, error.__traceback__)))
