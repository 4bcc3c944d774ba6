"""
Command-line interface for the iconship package.

This module provides the CLI commands for the iconship package:
- publish: Fetch a project's icons, build the component package and publish it
- generate: Build the component package from local SVG files without publishing
- serve: Start the HTTP trigger
"""

import os
import sys
import glob
import click
from typing import Optional

from iconship import __version__
from iconship.core.config import get_config_value
from iconship.core.constants import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    DEFAULT_SORT,
    SUPPORTED_COLLISION_POLICIES,
    SUPPORTED_ARCHIVERS,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
)
from iconship.core.error_handler import ConfigurationError, ValidationError, PipelineError
from iconship.core.logging_config import get_logger, configure_logging

logger = get_logger(__name__)

@click.group()
@click.version_option(version=__version__)
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default=None, help='Logging level (default: logging.level from the configuration)')
@click.option('--log-file', type=click.Path(dir_okay=False), default=None,
              help='Log file (default: logging.file from the configuration)')
def main(log_level: Optional[str] = None, log_file: Optional[str] = None):
    """
    iconship - Publish icon sets as React component packages.

    Icons are fetched from the icon service, converted into JSX and TSX
    components with type declarations, packed as an npm package and uploaded
    to an artifact feed.
    """
    configure_logging(level=log_level, log_file=log_file)

@main.command()
@click.argument('project_id', type=str)
@click.argument('project_name', type=str)
@click.option('--page', type=int, default=DEFAULT_PAGE, show_default=True, help='Icon listing page')
@click.option('--per-page', type=int, default=DEFAULT_PER_PAGE, show_default=True, help='Icons per page')
@click.option('--sort', type=str, default=DEFAULT_SORT, show_default=True, help='Sort expression of the icon listing')
@click.option('--version', 'package_version', type=str, help='Package version (default: package.version)')
@click.option('--package-name', type=str, help='Published package name (default: lower-cased project name)')
@click.option('--collision-policy', type=click.Choice(SUPPORTED_COLLISION_POLICIES),
              help='What to do when two icons map to the same component name')
@click.option('--archiver', type=click.Choice(SUPPORTED_ARCHIVERS), help='How the package archive is created')
@click.option('--work-dir', type=click.Path(file_okay=False, dir_okay=True), help='Directory for transient package files')
def publish(
    project_id: str,
    project_name: str,
    page: int,
    per_page: int,
    sort: str,
    package_version: Optional[str] = None,
    package_name: Optional[str] = None,
    collision_policy: Optional[str] = None,
    archiver: Optional[str] = None,
    work_dir: Optional[str] = None
):
    """
    Publish the icons of a project as a component package.

    PROJECT_ID: Project id on the icon service.

    PROJECT_NAME: Project name, also the package name unless --package-name is given.

    The artifact feed access token is read from the ICONSHIP_FEED_TOKEN
    environment variable (a .env file is honoured).

    Examples:
      iconship publish 72 arielinvestment
      iconship publish 72 arielinvestment --page 2 --per-page 50 --version 1.2.0
    """
    from iconship.pipeline.pipeline_runner import PipelineRunner
    from iconship.pipeline.request_validator import RequestValidator
    from iconship.pipeline.run_config import RunConfig

    try:
        request = RequestValidator().validate_publish_request({
            "project_id": int(project_id) if project_id.isdigit() else project_id,
            "project_name": project_name,
            "page": page,
            "per_page": per_page,
            "sort": sort,
        })
        run_config = RunConfig.from_config(
            version=package_version,
            package_name=package_name,
            collision_policy=collision_policy,
            archiver=archiver,
            work_dir=work_dir
        )
        runner = PipelineRunner.from_run_config(run_config)
    except (ValidationError, ConfigurationError) as e:
        logger.error(str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    result = runner.run(request)

    if not result.succeeded:
        click.echo(f"Error: {result.message}", err=True)
        sys.exit(1)

    click.echo(result.message)
    click.echo(f"Package: {result.package_name}@{result.version} ({result.asset_count} icon(s))")
    if result.remote_reference:
        click.echo(f"Reference: {result.remote_reference}")

@main.command()
@click.argument('svg_dir', type=click.Path(exists=True, file_okay=False, dir_okay=True, readable=True))
@click.argument('output_dir', type=click.Path(file_okay=False, dir_okay=True))
@click.option('--project-name', type=str, help='Project name (default: name of SVG_DIR)')
@click.option('--package-name', type=str, help='Package name (default: lower-cased project name)')
@click.option('--version', 'package_version', type=str, help='Package version (default: package.version)')
@click.option('--collision-policy', type=click.Choice(SUPPORTED_COLLISION_POLICIES),
              help='What to do when two icons map to the same component name')
@click.option('--archive', is_flag=True, default=False, help='Also create the .tgz archive in OUTPUT_DIR')
def generate(
    svg_dir: str,
    output_dir: str,
    project_name: Optional[str] = None,
    package_name: Optional[str] = None,
    package_version: Optional[str] = None,
    collision_policy: Optional[str] = None,
    archive: bool = False
):
    """
    Build the component package from local SVG files.

    SVG_DIR: Directory containing *.svg files (processed in file name order).

    OUTPUT_DIR: Directory the package directory is written to. The package
    directory itself is OUTPUT_DIR/<project name> and is replaced if it exists.

    Examples:
      iconship generate ./icons ./build
      iconship generate ./icons ./build --project-name brand-icons --archive
    """
    from iconship.component2package.package_assembler import PackageAssembler
    from iconship.core.constants import DEFAULT_COLLISION_POLICY, DEFAULT_PACKAGE_VERSION
    from iconship.core.models import RawAsset
    from iconship.core.utils import sanitize_path_component
    from iconship.icon2component.component_generator import ComponentGenerator

    project_name = project_name or os.path.basename(os.path.abspath(svg_dir))
    svg_paths = sorted(glob.glob(os.path.join(svg_dir, "*.svg")))

    if not svg_paths:
        click.echo(f"Warning: no .svg files found in {svg_dir}", err=True)

    try:
        assets = []
        for path in svg_paths:
            with open(path, "r", encoding="utf-8") as f:
                assets.append(RawAsset(name=os.path.basename(path), markup=f.read()))

        generator = ComponentGenerator(
            collision_policy=collision_policy or get_config_value("pipeline.collision_policy", DEFAULT_COLLISION_POLICY)
        )
        artifact_sets = generator.generate_all(assets)

        assembler = PackageAssembler(
            work_dir=output_dir,
            package_name=package_name or get_config_value("package.name"),
            version=package_version or get_config_value("package.version", DEFAULT_PACKAGE_VERSION),
            author=get_config_value("package.author"),
            peer_requirements=get_config_value("package.peer_requirements")
        )
        layout = assembler.assemble(
            project_name,
            artifact_sets,
            archive=archive,
            root_dir=os.path.join(output_dir, sanitize_path_component(project_name))
        )
    except (PipelineError, ConfigurationError, OSError) as e:
        logger.error(f"Error generating package: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Generated {len(artifact_sets)} component(s) in {layout.root_dir}")
    if layout.archive_path:
        click.echo(f"Archive: {layout.archive_path}")

@main.command()
@click.option('--host', type=str, help=f'Interface to bind (default: server.host or {DEFAULT_SERVER_HOST})')
@click.option('--port', type=int, help=f'Port to listen on (default: server.port or {DEFAULT_SERVER_PORT})')
def serve(host: Optional[str] = None, port: Optional[int] = None):
    """
    Start the HTTP trigger (POST /publish).
    """
    import uvicorn
    from iconship.server import create_app

    host = host or get_config_value("server.host", DEFAULT_SERVER_HOST)
    port = port or get_config_value("server.port", DEFAULT_SERVER_PORT)

    logger.info(f"Server is running at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port)
