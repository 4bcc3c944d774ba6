"""
Base adapter interfaces for external capabilities.

This module defines the interfaces the package assembler and the publisher
depend on: creating an archive from a package directory and uploading an
archive to an artifact feed. Concrete implementations live next to this
module; tests substitute their own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class FeedDestination:
    """
    Identity of an artifact feed.

    Attributes:
        organization_url: Organization base URL, e.g. https://dev.azure.com/my-org/
        project: Project that owns the feed.
        feed: Feed name.
    """

    organization_url: str
    project: str
    feed: str


class Archiver(ABC):
    """
    Base adapter interface for archive creation.
    """

    @abstractmethod
    def create_archive(self, source_dir: str, archive_path: str) -> str:
        """
        Create a distributable archive of a package directory.

        Args:
            source_dir (str): Directory holding package.json and dist/
            archive_path (str): Path of the archive to create

        Returns:
            str: Path to the created archive

        Raises:
            AssemblyError: If the archive cannot be created
        """
        pass

    def get_service_info(self) -> Dict[str, Any]:
        """
        Get information about the archiver.

        Returns:
            Dict[str, Any]: Archiver information
        """
        return {"name": self.__class__.__name__}


class FeedAdapter(ABC):
    """
    Base adapter interface for artifact feed uploads.
    """

    @abstractmethod
    def upload(self, archive_path: str, destination: FeedDestination, package_name: str) -> str:
        """
        Upload an archive to a feed.

        Args:
            archive_path (str): Path to the archive
            destination (FeedDestination): Target feed
            package_name (str): Name the package is published under

        Returns:
            str: Opaque reference to the uploaded package (e.g. its URL)

        Raises:
            PublishError: If the feed rejects the upload or cannot be reached
        """
        pass
