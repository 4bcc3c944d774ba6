"""
Publisher module.

This module uploads a package archive to an artifact feed and then removes
every transient file of the run. Cleanup runs whether the upload succeeded
or failed, and a failed cleanup is reported rather than ignored.
"""

import os
import shutil
from enum import Enum
from typing import Optional

from iconship.component2package.adapters.base import FeedAdapter, FeedDestination
from iconship.core.error_handler import CleanupError, PublishError, to_error_info
from iconship.core.logging_config import get_logger
from iconship.core.models import ErrorInfo, PackageLayout, PublishResult

logger = get_logger(__name__)


class PublishState(Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    UPLOAD_FAILED = "upload_failed"
    CLEANED_UP = "cleaned_up"


class Publisher:
    """
    Uploads archives through a FeedAdapter and cleans up afterwards.

    The state attribute follows Idle -> Uploading -> Uploaded | UploadFailed
    -> CleanedUp. CleanedUp is reached even when the cleanup itself fails;
    the failure is then part of the returned result.
    """

    def __init__(self, feed: FeedAdapter):
        self.feed = feed
        self.state = PublishState.IDLE

    def publish(
        self,
        archive_path: str,
        destination: FeedDestination,
        package_name: str,
        layout: Optional[PackageLayout] = None
    ) -> PublishResult:
        """
        Upload an archive and clean up the run's files.

        Args:
            archive_path: Path to the archive to upload.
            destination: Target feed.
            package_name: Name the package is published under.
            layout: Layout whose output root is removed after the upload.

        Returns:
            PublishResult: succeeded is True only if both the upload and the
            cleanup succeeded.
        """
        self.state = PublishState.UPLOADING
        remote_reference = None
        upload_error = None
        cleanup_error = None

        try:
            logger.info(f"Uploading {archive_path} as {package_name} to feed '{destination.feed}'")
            remote_reference = self.feed.upload(archive_path, destination, package_name)
            self.state = PublishState.UPLOADED
            logger.info(f"Package uploaded successfully: {remote_reference}")
        except Exception as e:
            self.state = PublishState.UPLOAD_FAILED
            upload_error = e if isinstance(e, PublishError) else PublishError(f"Upload failed: {e}", cause=e)
            logger.error(f"Error uploading package: {upload_error}")
        finally:
            try:
                self.cleanup(layout, archive_path)
            except CleanupError as e:
                cleanup_error = e
            self.state = PublishState.CLEANED_UP

        return self._result(remote_reference, upload_error, cleanup_error)

    def cleanup(self, layout: Optional[PackageLayout], archive_path: Optional[str] = None) -> None:
        """
        Remove the archive and the output root of a run.

        Paths that do not exist are skipped, so calling this twice is harmless.

        Args:
            layout: Layout of the run, if one was created.
            archive_path: Archive to remove. Defaults to layout.archive_path.

        Raises:
            CleanupError: If a path exists but cannot be removed.
        """
        if archive_path is None and layout is not None:
            archive_path = layout.archive_path

        failed = []
        errors = []

        if archive_path and os.path.lexists(archive_path):
            try:
                os.remove(archive_path)
                logger.info(f"Removed archive {archive_path}")
            except OSError as e:
                failed.append(archive_path)
                errors.append(e)

        if layout is not None and os.path.lexists(layout.root_dir):
            try:
                shutil.rmtree(layout.root_dir)
                logger.info(f"Removed output root {layout.root_dir}")
            except OSError as e:
                failed.append(layout.root_dir)
                errors.append(e)

        if failed:
            message = "; ".join(f"{path}: {error}" for path, error in zip(failed, errors))
            logger.error(f"Cleanup failed: {message}")
            raise CleanupError(f"Failed to remove {message}", paths=failed, cause=errors[0])

    @staticmethod
    def _result(
        remote_reference: Optional[str],
        upload_error: Optional[PublishError],
        cleanup_error: Optional[CleanupError]
    ) -> PublishResult:
        if upload_error is None and cleanup_error is None:
            return PublishResult(succeeded=True, remote_reference=remote_reference)

        if upload_error is not None:
            info = to_error_info(upload_error)
            if cleanup_error is not None:
                details = dict(info.details)
                details["cleanup_error"] = to_error_info(cleanup_error).message
                info = ErrorInfo(info.classification, info.message, details)
            return PublishResult(succeeded=False, error=info)

        # Uploaded, but files were left behind
        return PublishResult(
            succeeded=False,
            remote_reference=remote_reference,
            error=to_error_info(cleanup_error)
        )
