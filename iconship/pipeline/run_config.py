"""
Per-run configuration and request types.

A RunConfig carries everything one pipeline run needs (service URLs, feed
identity, access token, package version, policies). It is built once per run
from the configuration layers and explicit overrides. PipelineRunner.from_run_config
passes every setting on to the collaborators it builds, so none of them falls
back to the process-wide configuration.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional

from iconship.core.config import get_config_value
from iconship.core.constants import (
    DEFAULT_ICON_SERVICE_URL,
    DEFAULT_PACKAGE_VERSION,
    DEFAULT_PEER_REQUIREMENTS,
    DEFAULT_COLLISION_POLICY,
    DEFAULT_ARCHIVER,
    DEFAULT_ARCHIVER_TIMEOUT,
    DEFAULT_FETCH_WORKERS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_UPLOAD_TIMEOUT,
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    DEFAULT_SORT,
)
from iconship.core.credentials import get_feed_token


@dataclass(frozen=True)
class PublishRequest:
    """What to publish: one page of an icon service project."""

    project_id: Any
    project_name: str
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE
    sort: str = DEFAULT_SORT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PublishRequest":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass(frozen=True)
class RunConfig:
    icon_service_url: str = DEFAULT_ICON_SERVICE_URL
    organization_url: str = ""
    feed_project: str = ""
    feed_name: str = ""
    access_token: Optional[str] = field(default=None, repr=False)
    package_name: Optional[str] = None
    version: str = DEFAULT_PACKAGE_VERSION
    author: Optional[str] = None
    peer_requirements: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PEER_REQUIREMENTS))
    collision_policy: str = DEFAULT_COLLISION_POLICY
    archiver: str = DEFAULT_ARCHIVER
    archiver_timeout: float = DEFAULT_ARCHIVER_TIMEOUT
    work_dir: Optional[str] = None
    fetch_workers: int = DEFAULT_FETCH_WORKERS
    fetch_retries: int = DEFAULT_MAX_RETRIES
    fetch_retry_delay: float = DEFAULT_RETRY_DELAY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT

    @classmethod
    def from_config(cls, require_token: bool = True, **overrides) -> "RunConfig":
        """
        Build a RunConfig from the configuration layers.

        Overrides whose value is None are ignored, so CLI options that were
        not given fall back to the configuration.

        Args:
            require_token (bool): Whether a missing ICONSHIP_FEED_TOKEN is an error
            **overrides: Field values taking precedence over the configuration

        Returns:
            RunConfig: The run configuration

        Raises:
            ConfigurationError: If the access token is required and missing
        """
        values = {
            "icon_service_url": get_config_value("icon_service.base_url", DEFAULT_ICON_SERVICE_URL),
            "organization_url": get_config_value("feed.organization_url", ""),
            "feed_project": get_config_value("feed.project", ""),
            "feed_name": get_config_value("feed.name", ""),
            "package_name": get_config_value("package.name"),
            "version": get_config_value("package.version", DEFAULT_PACKAGE_VERSION),
            "author": get_config_value("package.author"),
            "peer_requirements": get_config_value("package.peer_requirements", dict(DEFAULT_PEER_REQUIREMENTS)),
            "collision_policy": get_config_value("pipeline.collision_policy", DEFAULT_COLLISION_POLICY),
            "archiver": get_config_value("pipeline.archiver", DEFAULT_ARCHIVER),
            "archiver_timeout": get_config_value("pipeline.archiver_timeout", DEFAULT_ARCHIVER_TIMEOUT),
            "work_dir": get_config_value("pipeline.work_dir"),
            "fetch_workers": get_config_value("fetcher.max_workers", DEFAULT_FETCH_WORKERS),
            "fetch_retries": get_config_value("fetcher.max_retries", DEFAULT_MAX_RETRIES),
            "fetch_retry_delay": get_config_value("fetcher.retry_delay", DEFAULT_RETRY_DELAY),
            "request_timeout": get_config_value("icon_service.timeout", DEFAULT_REQUEST_TIMEOUT),
            "upload_timeout": get_config_value("feed.upload_timeout", DEFAULT_UPLOAD_TIMEOUT),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        if not values.get("access_token"):
            values["access_token"] = get_feed_token(required=require_token)

        return cls(**values)

    def describe(self) -> Dict[str, Any]:
        """
        Get the configuration as a dictionary for logging.

        Returns:
            Dict[str, Any]: All fields, with the access token masked
        """
        description = {f.name: getattr(self, f.name) for f in fields(self)}
        if description.get("access_token"):
            description["access_token"] = "********"
        return description
