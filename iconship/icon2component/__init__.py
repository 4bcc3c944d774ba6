"""
Icon to component pipeline components.

This module provides the fetching of icon assets and their conversion into
React component sources.
"""

from iconship.icon2component.identifier import derive, IdentifierRegistry
from iconship.icon2component.markup_normalizer import normalize
from iconship.icon2component.component_generator import ComponentGenerator
from iconship.icon2component.asset_fetcher import AssetFetcher
