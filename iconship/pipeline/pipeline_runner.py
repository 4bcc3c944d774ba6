"""
Pipeline runner module.

This module runs one publishing pipeline: fetch the icon assets, generate
the components, assemble and archive the package, publish it, and report a
single outcome for the whole run.
"""

import time
from typing import Dict, Optional

from iconship.component2package.adapters.archivers import get_archiver
from iconship.component2package.adapters.azure_artifacts import AzureArtifactsFeedAdapter
from iconship.component2package.adapters.base import FeedDestination
from iconship.component2package.package_assembler import PackageAssembler
from iconship.component2package.publisher import Publisher
from iconship.core.error_handler import (
    AssemblyError,
    CleanupError,
    ConfigurationError,
    log_pipeline_error,
    to_error_info,
)
from iconship.core.logging_config import get_logger, log_execution_context
from iconship.core.models import ErrorInfo, PackageLayout, RunResult
from iconship.icon2component.asset_fetcher import AssetFetcher
from iconship.icon2component.component_generator import ComponentGenerator
from iconship.pipeline.run_config import PublishRequest, RunConfig

logger = get_logger(__name__)

SUCCESS_MESSAGE = "Package published to the artifact feed successfully"

class PipelineRunner:
    """
    Class for running the publishing pipeline.

    Stages run strictly in order: fetch, generate, assemble, publish. The
    first failing stage aborts the run, and whatever the assembler created is
    removed before the outcome is reported.
    """

    def __init__(
        self,
        fetcher: AssetFetcher,
        generator: ComponentGenerator,
        assembler: PackageAssembler,
        publisher: Publisher,
        destination: FeedDestination
    ):
        """
        Initialize the PipelineRunner.

        Args:
            fetcher: Asset fetcher instance.
            generator: Component generator instance.
            assembler: Package assembler instance.
            publisher: Publisher instance.
            destination: Feed the package is published to.
        """
        self.fetcher = fetcher
        self.generator = generator
        self.assembler = assembler
        self.publisher = publisher
        self.destination = destination

    @classmethod
    def from_run_config(cls, run_config: RunConfig) -> "PipelineRunner":
        """
        Create a runner wired with the default collaborators for a run configuration.

        Args:
            run_config: Configuration of the run.

        Returns:
            A PipelineRunner.

        Raises:
            ConfigurationError: If the feed identity or access token is missing.
        """
        missing = [
            key for key in ("organization_url", "feed_name", "access_token")
            if not getattr(run_config, key)
        ]
        if missing:
            raise ConfigurationError(
                "Run configuration is incomplete",
                component="pipeline",
                missing_keys=missing
            )

        log_execution_context(logger, run_config.describe())

        fetcher = AssetFetcher(
            base_url=run_config.icon_service_url,
            max_workers=run_config.fetch_workers,
            timeout=run_config.request_timeout,
            max_retries=run_config.fetch_retries,
            retry_delay=run_config.fetch_retry_delay
        )
        generator = ComponentGenerator(collision_policy=run_config.collision_policy)
        assembler = PackageAssembler(
            work_dir=run_config.work_dir,
            archiver=get_archiver(run_config.archiver, timeout=run_config.archiver_timeout),
            package_name=run_config.package_name,
            version=run_config.version,
            author=run_config.author,
            peer_requirements=run_config.peer_requirements
        )
        publisher = Publisher(AzureArtifactsFeedAdapter(
            access_token=run_config.access_token,
            timeout=run_config.upload_timeout
        ))
        destination = FeedDestination(
            organization_url=run_config.organization_url,
            project=run_config.feed_project,
            feed=run_config.feed_name
        )

        return cls(fetcher, generator, assembler, publisher, destination)

    def run(self, request: PublishRequest) -> RunResult:
        """
        Run the pipeline for one request.

        Args:
            request: What to publish.

        Returns:
            RunResult: succeeded is True only if every stage, including the
            final cleanup, succeeded.
        """
        timings: Dict[str, float] = {}
        layout: Optional[PackageLayout] = None
        package_name = self.assembler.resolve_package_name(request.project_name)
        asset_count = 0

        logger.info(f"Starting pipeline for project {request.project_id} ({request.project_name})")
        started = time.time()

        try:
            stage_start = time.time()
            assets = self.fetcher.fetch_all(request.project_id, request.page, request.per_page, request.sort)
            timings["fetch"] = time.time() - stage_start
            asset_count = len(assets)

            stage_start = time.time()
            artifact_sets = self.generator.generate_all(assets)
            timings["generate"] = time.time() - stage_start

            stage_start = time.time()
            layout = self.assembler.assemble(request.project_name, artifact_sets)
            timings["assemble"] = time.time() - stage_start

            stage_start = time.time()
            # The publisher owns the layout from here on and always cleans it up
            owned_layout, layout = layout, None
            publish_result = self.publisher.publish(
                owned_layout.archive_path,
                self.destination,
                package_name,
                layout=owned_layout
            )
            timings["publish"] = time.time() - stage_start

        except Exception as e:
            log_pipeline_error(e)
            if isinstance(e, AssemblyError) and e.layout is not None:
                layout = e.layout
            error_info = self._release(layout, to_error_info(e))
            timings["total"] = time.time() - started

            return RunResult(
                succeeded=False,
                message=f"{error_info.classification}: {error_info.message}",
                package_name=package_name,
                version=self.assembler.version,
                asset_count=asset_count,
                error=error_info,
                timings=timings
            )

        timings["total"] = time.time() - started

        if not publish_result.succeeded:
            logger.error(f"Publishing failed: {publish_result.error.message}")
            return RunResult(
                succeeded=False,
                message=f"{publish_result.error.classification}: {publish_result.error.message}",
                package_name=package_name,
                version=self.assembler.version,
                asset_count=asset_count,
                remote_reference=publish_result.remote_reference,
                error=publish_result.error,
                timings=timings
            )

        logger.info(f"Pipeline completed in {timings['total']:.2f} seconds")
        return RunResult(
            succeeded=True,
            message=SUCCESS_MESSAGE,
            package_name=package_name,
            version=self.assembler.version,
            asset_count=asset_count,
            remote_reference=publish_result.remote_reference,
            timings=timings
        )

    def _release(self, layout: Optional[PackageLayout], error_info: ErrorInfo) -> ErrorInfo:
        """
        Remove a layout left behind by a failed stage.

        A cleanup failure is attached to the stage error instead of replacing it.
        """
        if layout is None:
            return error_info

        try:
            self.publisher.cleanup(layout)
        except CleanupError as e:
            details = dict(error_info.details)
            details["cleanup_error"] = e.message
            return ErrorInfo(error_info.classification, error_info.message, details)

        return error_info
