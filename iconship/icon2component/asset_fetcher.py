"""
Client for the icon service.

This module lists the icons of a project and downloads the SVG markup of
every icon image. Image downloads run concurrently on a bounded thread pool
and are put back into listing order before they are returned.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Any, List, Optional, Tuple

import requests

from iconship.core.config import get_config_value
from iconship.core.constants import (
    DEFAULT_ICON_SERVICE_URL,
    DEFAULT_FETCH_WORKERS,
    MAX_FETCH_WORKERS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
)
from iconship.core.error_handler import APIError, FetchError, log_api_error, retry_api_request
from iconship.core.logging_config import get_logger, log_api_request
from iconship.core.models import RawAsset

# Initialize logger
logger = get_logger(__name__)

class AssetFetcher:
    """
    Fetches the raw SVG assets of a project from the icon service.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        max_workers: Optional[int] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the fetcher.

        Args:
            base_url (str, optional): Icon service base URL. Defaults to icon_service.base_url.
            max_workers (int, optional): Concurrent image downloads, capped at 16.
            timeout (float, optional): Per-request timeout in seconds.
            max_retries (int, optional): Attempts per request.
            retry_delay (float, optional): Initial backoff delay in seconds.
            session (requests.Session, optional): Session to use for requests.
        """
        self.base_url = (base_url or get_config_value("icon_service.base_url", DEFAULT_ICON_SERVICE_URL)).rstrip("/")

        workers = max_workers or get_config_value("fetcher.max_workers", DEFAULT_FETCH_WORKERS)
        self.max_workers = max(1, min(int(workers), MAX_FETCH_WORKERS))

        self.timeout = timeout or get_config_value("icon_service.timeout", DEFAULT_REQUEST_TIMEOUT)
        self.max_retries = max_retries or get_config_value("fetcher.max_retries", DEFAULT_MAX_RETRIES)
        self.retry_delay = retry_delay if retry_delay is not None else get_config_value("fetcher.retry_delay", DEFAULT_RETRY_DELAY)
        self.session = session or requests.Session()

        logger.info(f"Initialized {self.__class__.__name__} for {self.base_url} with {self.max_workers} worker(s)")

    def fetch_all(self, project_id: Any, page: int, page_size: int, sort_key: str) -> List[RawAsset]:
        """
        Fetch every icon image of a project page.

        Args:
            project_id: Icon service project id.
            page (int): Page number.
            page_size (int): Icons per page.
            sort_key (str): Sort expression understood by the service (e.g. "-iconId").

        Returns:
            List[RawAsset]: Assets in listing order (icon order, then image order).

        Raises:
            FetchError: If the listing or any image download fails.
        """
        icons = self.list_icons(project_id, page, page_size, sort_key)
        references = self.image_references(icons)

        logger.info(f"Fetching {len(references)} image(s) from {len(icons)} icon(s)")

        if not references:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                (index, name, executor.submit(self.fetch_markup, path))
                for index, (name, path) in enumerate(references)
            ]

            results = []
            for index, name, future in futures:
                try:
                    markup = future.result()
                except FetchError:
                    # Abort the run without starting the downloads still queued
                    for _, _, pending in futures:
                        pending.cancel()
                    raise
                results.append((index, RawAsset(name=name, markup=markup)))

        # Completion order is irrelevant, listing order is what the barrels follow
        results.sort(key=lambda item: item[0])
        return [asset for _, asset in results]

    def list_icons(self, project_id: Any, page: int, page_size: int, sort_key: str) -> List[Dict[str, Any]]:
        """
        Call the listing endpoint of the icon service.

        A response without a result.icons list is treated as an empty project.

        Returns:
            List[Dict[str, Any]]: Icon records

        Raises:
            FetchError: If the request fails.
        """
        endpoint = f"{self.base_url}/api/project/{project_id}/icons"
        payload = {"params": {"page": page, "perPage": page_size, "sort": sort_key}}

        log_api_request(logger, "icon-service", endpoint, payload["params"])

        try:
            data = retry_api_request(
                self.session.post,
                endpoint,
                error_message="Icon listing failed",
                max_retries=self.max_retries,
                retry_delay=self.retry_delay,
                json=payload,
                timeout=self.timeout
            )
        except APIError as e:
            log_api_error(e)
            raise FetchError(f"Failed to list icons for project {project_id}: {e.message}", cause=e) from e

        icons = None
        if isinstance(data, dict):
            result = data.get("result")
            if isinstance(result, dict):
                icons = result.get("icons")

        if not isinstance(icons, list):
            logger.warning(f"Listing for project {project_id} has no result.icons, treating as empty")
            return []

        return icons

    @staticmethod
    def image_references(icons: List[Dict[str, Any]]) -> List[Tuple[str, str]]:
        """
        Flatten icon records into (image name, image path) pairs in listing order.

        Icons without images, and image entries missing a name or path, contribute nothing.
        """
        references = []
        for icon in icons:
            if not isinstance(icon, dict):
                continue
            for image in icon.get("iconImages") or []:
                if not isinstance(image, dict):
                    continue
                name = image.get("imageName")
                path = image.get("iconImagePath")
                if not name or not path:
                    logger.warning(f"Skipping image entry without name or path: {image}")
                    continue
                references.append((name, path))
        return references

    def fetch_markup(self, image_path: str) -> str:
        """
        Download the raw markup of one image.

        Args:
            image_path (str): Path of the image relative to the service base URL

        Returns:
            str: The SVG markup

        Raises:
            FetchError: If the download fails.
        """
        endpoint = f"{self.base_url}/{image_path.lstrip('/')}"

        try:
            return retry_api_request(
                self.session.get,
                endpoint,
                error_message="Image download failed",
                response_type="text",
                max_retries=self.max_retries,
                retry_delay=self.retry_delay,
                timeout=self.timeout
            )
        except APIError as e:
            log_api_error(e)
            raise FetchError(f"Failed to download {image_path}: {e.message}", cause=e) from e
