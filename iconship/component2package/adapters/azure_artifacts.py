"""
Adapter for Azure Artifacts npm feeds.

The archive is published the way `npm publish` does it: a single PUT of a
JSON document carrying the package metadata and the base64 encoded tarball to
the feed's npm registry endpoint, authenticated with a personal access token.
"""

import json
import base64
import hashlib
import tarfile
from typing import Dict, Any, Optional
from urllib.parse import quote

import requests

from iconship.component2package.adapters.base import FeedAdapter, FeedDestination
from iconship.core.constants import DEFAULT_UPLOAD_TIMEOUT, MANIFEST_FILENAME
from iconship.core.error_handler import APIError, PublishError, handle_api_request, log_api_error
from iconship.core.logging_config import get_logger, log_api_request

# Initialize logger
logger = get_logger(__name__)

class AzureArtifactsFeedAdapter(FeedAdapter):
    """
    Publishes npm tarballs to an Azure Artifacts feed.
    """

    def __init__(
        self,
        access_token: str,
        timeout: float = DEFAULT_UPLOAD_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the adapter.

        Args:
            access_token (str): Personal access token with packaging write scope
            timeout (float): Upload timeout in seconds
            session (requests.Session, optional): Session to use for requests
        """
        if not access_token:
            raise ValueError("An access token is required to publish to Azure Artifacts")

        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    @staticmethod
    def registry_url(destination: FeedDestination) -> str:
        """
        Get the npm registry URL of a feed.

        Returns:
            str: e.g. https://pkgs.dev.azure.com/org/project/_packaging/feed/npm/registry
        """
        base = destination.organization_url.rstrip("/")
        if destination.project:
            base = f"{base}/{destination.project}"
        return f"{base}/_packaging/{destination.feed}/npm/registry"

    def upload(self, archive_path: str, destination: FeedDestination, package_name: str) -> str:
        registry = self.registry_url(destination)

        try:
            manifest = read_archive_manifest(archive_path)
            with open(archive_path, "rb") as f:
                tarball = f.read()
        except (OSError, tarfile.TarError, ValueError) as e:
            raise PublishError(f"Cannot read archive {archive_path}: {e}", cause=e) from e

        version = manifest.get("version")
        if not version:
            raise PublishError(f"Archive {archive_path} has no package version")

        document = build_publish_document(package_name, manifest, tarball, registry)
        endpoint = f"{registry}/{quote(package_name, safe='@')}"

        log_api_request(logger, "azure-artifacts", endpoint, {
            "package": package_name,
            "version": version,
            "size": len(tarball),
        })

        try:
            handle_api_request(
                self.session.put,
                endpoint,
                error_message="Package upload failed",
                json=document,
                auth=("iconship", self.access_token),
                timeout=self.timeout
            )
        except APIError as e:
            log_api_error(e)
            raise PublishError(f"Upload of {package_name}@{version} to feed '{destination.feed}' failed: {e.message}", cause=e) from e

        reference = tarball_url(registry, package_name, version)
        logger.info(f"Published {package_name}@{version} to {reference}")
        return reference


def read_archive_manifest(archive_path: str) -> Dict[str, Any]:
    """
    Read package.json out of an npm tarball.

    Args:
        archive_path (str): Path to the .tgz

    Returns:
        Dict[str, Any]: The manifest

    Raises:
        ValueError: If the archive has no package.json
    """
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            if member.isfile() and member.name.split("/", 1)[-1] == MANIFEST_FILENAME and member.name.count("/") == 1:
                handle = tar.extractfile(member)
                return json.loads(handle.read().decode("utf-8"))

    raise ValueError(f"No {MANIFEST_FILENAME} in {archive_path}")


def tarball_filename(package_name: str, version: str) -> str:
    # Scoped packages drop the scope from the tarball file name
    return f"{package_name.split('/')[-1]}-{version}.tgz"


def tarball_url(registry: str, package_name: str, version: str) -> str:
    return f"{registry}/{package_name}/-/{tarball_filename(package_name, version)}"


def build_publish_document(
    package_name: str,
    manifest: Dict[str, Any],
    tarball: bytes,
    registry: str
) -> Dict[str, Any]:
    """
    Build the JSON document `npm publish` sends to a registry.

    Args:
        package_name (str): Name the package is published under
        manifest (Dict[str, Any]): The package.json content
        tarball (bytes): The archive bytes
        registry (str): Registry URL, used for the tarball URL

    Returns:
        Dict[str, Any]: The publish document
    """
    version = manifest["version"]
    filename = tarball_filename(package_name, version)

    version_metadata = dict(manifest)
    version_metadata.update({
        "name": package_name,
        "_id": f"{package_name}@{version}",
        "dist": {
            "shasum": hashlib.sha1(tarball).hexdigest(),
            "integrity": "sha512-" + base64.b64encode(hashlib.sha512(tarball).digest()).decode("ascii"),
            "tarball": tarball_url(registry, package_name, version),
        },
    })

    return {
        "_id": package_name,
        "name": package_name,
        "dist-tags": {"latest": version},
        "versions": {version: version_metadata},
        "_attachments": {
            filename: {
                "content_type": "application/octet-stream",
                "data": base64.b64encode(tarball).decode("ascii"),
                "length": len(tarball),
            }
        },
    }
