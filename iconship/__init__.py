"""
iconship - Icon set to React component package pipeline

Fetches SVG icons from the icon service, generates JSX and TSX components with
type declarations, assembles them into an npm package and publishes the
archive to an artifact feed.
"""

__version__ = "0.1.0"

# Import main components for easier access
from iconship.icon2component.asset_fetcher import AssetFetcher
from iconship.icon2component.component_generator import ComponentGenerator
from iconship.component2package.package_assembler import PackageAssembler
from iconship.component2package.publisher import Publisher
from iconship.pipeline.pipeline_runner import PipelineRunner
