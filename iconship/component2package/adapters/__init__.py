"""
Adapters for archive creation and artifact feed uploads.
"""

from iconship.component2package.adapters.base import Archiver, FeedAdapter, FeedDestination
from iconship.component2package.adapters.archivers import TarballArchiver, NpmPackArchiver, get_archiver
from iconship.component2package.adapters.azure_artifacts import AzureArtifactsFeedAdapter
