"""
Archiver implementations.

- TarballArchiver writes an npm-style gzip tarball in process
- NpmPackArchiver shells out to `npm pack` with a timeout
"""

import os
import shutil
import tarfile
import tempfile
import subprocess
from typing import Dict, Any, Optional

from iconship.component2package.adapters.base import Archiver
from iconship.core.constants import DEFAULT_ARCHIVER, SUPPORTED_ARCHIVERS, DEFAULT_ARCHIVER_TIMEOUT
from iconship.core.error_handler import AssemblyError, ConfigurationError
from iconship.core.logging_config import get_logger

logger = get_logger(__name__)

# npm expects every tarball member under this directory
NPM_TARBALL_PREFIX = "package"


class TarballArchiver(Archiver):
    """
    Creates a .tgz whose members live under package/, as `npm pack` does.
    """

    def create_archive(self, source_dir: str, archive_path: str) -> str:
        if not os.path.isdir(source_dir):
            raise AssemblyError(f"Cannot archive missing directory {source_dir}")

        try:
            with tarfile.open(archive_path, "w:gz") as tar:
                tar.add(source_dir, arcname=NPM_TARBALL_PREFIX, filter=self._reset_ownership)
        except (OSError, tarfile.TarError) as e:
            raise AssemblyError(f"Failed to create archive {archive_path}: {e}", cause=e) from e

        logger.info(f"Created archive {archive_path}")
        return archive_path

    @staticmethod
    def _reset_ownership(info: tarfile.TarInfo) -> tarfile.TarInfo:
        info.uid = info.gid = 0
        info.uname = info.gname = ""
        return info


class NpmPackArchiver(Archiver):
    """
    Runs `npm pack` in the package directory.

    The npm binary must be on PATH. The process is killed after `timeout`
    seconds and the timeout is reported as an AssemblyError.

    npm names its tarball <name>-<version>.tgz, which is the same for every
    run of a package, so each call packs into its own staging directory next
    to the archive and removes it afterwards.
    """

    def __init__(self, timeout: float = DEFAULT_ARCHIVER_TIMEOUT, npm_executable: str = "npm"):
        self.timeout = timeout
        self.npm_executable = npm_executable

    def create_archive(self, source_dir: str, archive_path: str) -> str:
        destination = os.path.dirname(os.path.abspath(archive_path))

        try:
            staging_dir = tempfile.mkdtemp(prefix=f".{os.path.basename(archive_path)}-", dir=destination)
        except OSError as e:
            raise AssemblyError(f"Cannot create staging directory in {destination}: {e}", cause=e) from e

        try:
            produced = self._pack(source_dir, staging_dir)
            try:
                shutil.move(produced, archive_path)
            except OSError as e:
                raise AssemblyError(f"Failed to move {produced} to {archive_path}: {e}", cause=e) from e
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)

        logger.info(f"Created archive {archive_path}")
        return archive_path

    def _pack(self, source_dir: str, staging_dir: str) -> str:
        """
        Run `npm pack` and return the path of the tarball it wrote.
        """
        command = [self.npm_executable, "pack", "--pack-destination", staging_dir]

        logger.info(f"Running {' '.join(command)} in {source_dir}")

        try:
            completed = subprocess.run(
                command,
                cwd=source_dir,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise AssemblyError(f"npm pack timed out after {self.timeout} seconds", cause=e) from e
        except subprocess.CalledProcessError as e:
            raise AssemblyError(f"npm pack failed with exit code {e.returncode}: {(e.stderr or '').strip()}", cause=e) from e
        except (OSError, UnicodeDecodeError) as e:
            raise AssemblyError(f"Could not run {self.npm_executable}: {e}", cause=e) from e

        # npm prints the tarball file name as the last line of stdout
        lines = [line.strip() for line in completed.stdout.splitlines() if line.strip()]
        if not lines:
            raise AssemblyError("npm pack did not report a tarball name")

        return os.path.join(staging_dir, lines[-1])

    def get_service_info(self) -> Dict[str, Any]:
        return {
            "name": self.__class__.__name__,
            "npm_executable": self.npm_executable,
            "timeout": self.timeout,
        }


def get_archiver(name: Optional[str] = None, timeout: float = DEFAULT_ARCHIVER_TIMEOUT) -> Archiver:
    """
    Get an archiver by name.

    Args:
        name (str, optional): "tarball" (default) or "npm"
        timeout (float): Timeout for archivers that run a subprocess

    Returns:
        Archiver: The archiver

    Raises:
        ConfigurationError: If the name is unknown
    """
    name = (name or DEFAULT_ARCHIVER).lower()

    if name == "tarball":
        return TarballArchiver()
    if name == "npm":
        return NpmPackArchiver(timeout=timeout)

    raise ConfigurationError(
        f"Unknown archiver '{name}'. Supported: {', '.join(SUPPORTED_ARCHIVERS)}",
        component="archiver"
    )
