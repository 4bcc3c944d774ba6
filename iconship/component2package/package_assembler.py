"""
Package assembler module.

This module lays out the npm package for one run: the untyped components
under dist/jsx, the typed components and declarations under dist/tsx, a
barrel file per subtree, the package.json manifest, and finally the archive.
"""

import os
import shutil
import tempfile
from typing import Dict, List, Optional, Sequence

from iconship.component2package.adapters.base import Archiver
from iconship.component2package.adapters.archivers import TarballArchiver
from iconship.core.constants import (
    UNTYPED_SUBDIR,
    TYPED_SUBDIR,
    UNTYPED_BARREL,
    TYPED_BARREL,
    DECLARATION_BARREL,
    MANIFEST_FILENAME,
    ARCHIVE_EXTENSION,
    DEFAULT_PACKAGE_VERSION,
    DEFAULT_PEER_REQUIREMENTS,
)
from iconship.core.error_handler import AssemblyError
from iconship.core.logging_config import get_logger
from iconship.core.models import ComponentArtifactSet, PackageLayout, PackageManifest
from iconship.core.utils import ensure_dir, generate_run_id, sanitize_path_component, save_json_file, write_text_file

logger = get_logger(__name__)

class PackageAssembler:
    """
    Class for writing a package layout and archiving it.

    Every call to assemble() works in its own output root named after the
    project and a fresh run id, so concurrent runs never share files.
    """

    def __init__(
        self,
        work_dir: Optional[str] = None,
        archiver: Optional[Archiver] = None,
        package_name: Optional[str] = None,
        version: str = DEFAULT_PACKAGE_VERSION,
        author: Optional[str] = None,
        peer_requirements: Optional[Dict[str, str]] = None
    ):
        """
        Initialize the PackageAssembler.

        Args:
            work_dir: Directory holding output roots and archives. Defaults to
                an "iconship" directory in the system temp directory.
            archiver: Archive capability. Defaults to TarballArchiver.
            package_name: Published package name. Defaults to the lower-cased project name.
            version: Package version.
            author: Optional author written to the manifest.
            peer_requirements: Peer dependency ranges. Defaults to react and react-dom >= 16.
        """
        self.work_dir = work_dir or os.path.join(tempfile.gettempdir(), "iconship")
        self.archiver = archiver or TarballArchiver()
        self.package_name = package_name
        self.version = version or DEFAULT_PACKAGE_VERSION
        self.author = author
        self.peer_requirements = dict(peer_requirements or DEFAULT_PEER_REQUIREMENTS)

    def resolve_package_name(self, project_name: str) -> str:
        """
        Get the name the package is published under.

        Args:
            project_name: Project name of the run.

        Returns:
            The configured package name, else the project name lower-cased
            with whitespace replaced by hyphens.
        """
        if self.package_name:
            return self.package_name
        return "-".join(project_name.lower().split())

    def build_manifest(self, project_name: str) -> PackageManifest:
        return PackageManifest(
            name=self.resolve_package_name(project_name),
            version=self.version,
            entry_points={
                "untyped": f"{UNTYPED_SUBDIR}/{UNTYPED_BARREL}",
                "typed": f"{TYPED_SUBDIR}/{TYPED_BARREL}",
                "declarations": f"{TYPED_SUBDIR}/{DECLARATION_BARREL}",
            },
            peer_requirements=self.peer_requirements,
            author=self.author
        )

    def plan_layout(
        self,
        project_name: str,
        run_id: Optional[str] = None,
        root_dir: Optional[str] = None
    ) -> PackageLayout:
        """
        Compute the paths of a run's layout without touching the filesystem.

        Args:
            project_name: Project name of the run.
            run_id: Run identifier. A new one is generated if not given.
            root_dir: Explicit output root. Defaults to <work_dir>/<project>-<run id>.

        Returns:
            The layout of the run.
        """
        run_id = run_id or generate_run_id()
        if root_dir is None:
            root_dir = os.path.join(self.work_dir, f"{sanitize_path_component(project_name)}-{run_id}")

        return PackageLayout(
            root_dir=root_dir,
            untyped_dir=os.path.join(root_dir, *UNTYPED_SUBDIR.split("/")),
            typed_dir=os.path.join(root_dir, *TYPED_SUBDIR.split("/")),
            manifest_path=os.path.join(root_dir, MANIFEST_FILENAME),
            run_id=run_id
        )

    def create_layout(self, layout: PackageLayout) -> PackageLayout:
        """
        Create (or truncate) the output root and its two subtrees.
        """
        if os.path.exists(layout.root_dir):
            logger.warning(f"Output root {layout.root_dir} already exists, truncating it")
            shutil.rmtree(layout.root_dir)

        ensure_dir(layout.untyped_dir)
        ensure_dir(layout.typed_dir)

        logger.info(f"Created package layout in {layout.root_dir}")
        return layout

    def write_artifacts(self, layout: PackageLayout, artifact_sets: Sequence[ComponentArtifactSet]) -> None:
        for artifact_set in artifact_sets:
            write_text_file(os.path.join(layout.untyped_dir, artifact_set.untyped_filename), artifact_set.untyped_source)
            write_text_file(os.path.join(layout.typed_dir, artifact_set.typed_filename), artifact_set.typed_source)
            write_text_file(os.path.join(layout.typed_dir, artifact_set.declaration_filename), artifact_set.declaration_source)

        logger.info(f"Wrote {len(artifact_sets)} component(s) to {layout.root_dir}")

    def write_barrels(self, layout: PackageLayout, artifact_sets: Sequence[ComponentArtifactSet]) -> List[str]:
        """
        Write the barrel files of both subtrees.

        Export lines keep generation order. The typed lines are written to
        both index.ts and index.d.ts so the manifest's types entry exists.

        Returns:
            Paths of the written barrels.
        """
        untyped_lines = [artifact_set.untyped_export_line for artifact_set in artifact_sets]
        typed_lines = [artifact_set.typed_export_line for artifact_set in artifact_sets]

        return [
            write_text_file(os.path.join(layout.untyped_dir, UNTYPED_BARREL), "\n".join(untyped_lines)),
            write_text_file(os.path.join(layout.typed_dir, TYPED_BARREL), "\n".join(typed_lines)),
            write_text_file(os.path.join(layout.typed_dir, DECLARATION_BARREL), "\n".join(typed_lines)),
        ]

    def write_manifest(self, layout: PackageLayout, manifest: PackageManifest) -> str:
        save_json_file(manifest.to_dict(), layout.manifest_path)
        logger.info(f"Wrote manifest for {manifest.name}@{manifest.version}")
        return layout.manifest_path

    def archive_path_for(self, layout: PackageLayout, package_name: str) -> str:
        """
        Get the archive path of a run: <work_dir>/<package name>-<run id>.tgz.

        The archive sits next to the output root, never inside it.
        """
        base = sanitize_path_component(package_name.replace("/", "-").lstrip("@"))
        parent = os.path.dirname(os.path.abspath(layout.root_dir))
        return os.path.join(parent, f"{base}-{layout.run_id}{ARCHIVE_EXTENSION}")

    def assemble(
        self,
        project_name: str,
        artifact_sets: Sequence[ComponentArtifactSet],
        archive: bool = True,
        root_dir: Optional[str] = None
    ) -> PackageLayout:
        """
        Write the package layout for a run and archive it.

        Args:
            project_name: Project name of the run.
            artifact_sets: Generated components, in generation order.
            archive: Whether to create the archive.
            root_dir: Explicit output root (see plan_layout).

        Returns:
            The layout; archive_path is set when an archive was created.

        Raises:
            AssemblyError: If writing or archiving fails for any reason. The error carries the
                partially created layout so it can be cleaned up.
        """
        layout = self.plan_layout(project_name, root_dir=root_dir)

        try:
            self.create_layout(layout)
            manifest = self.build_manifest(project_name)

            self.write_artifacts(layout, artifact_sets)
            self.write_barrels(layout, artifact_sets)
            self.write_manifest(layout, manifest)

            if archive:
                archive_path = self.archive_path_for(layout, manifest.name)
                # Recorded before archiving so a half-written archive is cleaned up too
                layout.archive_path = archive_path
                self.archiver.create_archive(layout.root_dir, archive_path)

        except AssemblyError as e:
            if e.layout is None:
                e.layout = layout
            raise
        except Exception as e:
            raise AssemblyError(f"Failed to assemble package for {project_name}: {e}", layout=layout, cause=e) from e

        return layout
