"""
Tests for archiver adapters.
"""

import os
import tarfile
import tempfile
import subprocess
from concurrent.futures import ThreadPoolExecutor
import pytest
from unittest.mock import patch, MagicMock

from iconship.component2package.adapters.archivers import (
    TarballArchiver,
    NpmPackArchiver,
    get_archiver
)
from iconship.core.error_handler import AssemblyError, ConfigurationError

class TestTarballArchiver:
    """
    Tests for the TarballArchiver class.
    """

    def setup_method(self):
        """
        Set up test environment.
        """
        self.temp_dir = tempfile.TemporaryDirectory()
        self.source_dir = os.path.join(self.temp_dir.name, "icons-1")
        os.makedirs(os.path.join(self.source_dir, "dist", "jsx"))
        with open(os.path.join(self.source_dir, "package.json"), "w") as f:
            f.write('{"name": "icons", "version": "1.0.0"}')
        with open(os.path.join(self.source_dir, "dist", "jsx", "index.js"), "w") as f:
            f.write("")
        self.archive_path = os.path.join(self.temp_dir.name, "icons-1.tgz")

    def teardown_method(self):
        """
        Clean up test environment.
        """
        self.temp_dir.cleanup()

    def test_create_archive(self):
        """
        Test that members are stored under package/.
        """
        result = TarballArchiver().create_archive(self.source_dir, self.archive_path)

        assert result == self.archive_path
        with tarfile.open(self.archive_path, "r:gz") as tar:
            members = {member.name: member for member in tar.getmembers()}

        assert "package/package.json" in members
        assert "package/dist/jsx/index.js" in members
        assert all(name == "package" or name.startswith("package/") for name in members)
        assert members["package/package.json"].uid == 0

    def test_missing_source_dir(self):
        """
        Test that archiving a missing directory fails.
        """
        with pytest.raises(AssemblyError):
            TarballArchiver().create_archive(os.path.join(self.temp_dir.name, "missing"), self.archive_path)

    def test_unwritable_archive_path(self):
        """
        Test that an archive path in a missing directory fails.
        """
        with pytest.raises(AssemblyError) as excinfo:
            TarballArchiver().create_archive(self.source_dir, os.path.join(self.temp_dir.name, "no", "a.tgz"))

        assert isinstance(excinfo.value.cause, OSError)


class TestNpmPackArchiver:
    """
    Tests for the NpmPackArchiver class.
    """

    def setup_method(self):
        """
        Set up test environment.
        """
        self.temp_dir = tempfile.TemporaryDirectory()
        self.source_dir = os.path.join(self.temp_dir.name, "icons-1")
        os.makedirs(self.source_dir)
        self.archive_path = os.path.join(self.temp_dir.name, "icons-1.tgz")
        self.archiver = NpmPackArchiver(timeout=5)

    def teardown_method(self):
        """
        Clean up test environment.
        """
        self.temp_dir.cleanup()

    @patch("iconship.component2package.adapters.archivers.subprocess.run")
    def test_create_archive(self, mock_run):
        """
        Test that the tarball produced by npm is moved to the archive path.
        """
        def fake_npm(command, **kwargs):
            with open(os.path.join(command[-1], "icons-1.0.0.tgz"), "wb") as f:
                f.write(b"tarball")
            return MagicMock(stdout="npm notice\nicons-1.0.0.tgz\n")

        mock_run.side_effect = fake_npm

        result = self.archiver.create_archive(self.source_dir, self.archive_path)

        assert result == self.archive_path
        assert os.path.isfile(self.archive_path)
        # Only the source directory and the archive are left
        assert sorted(os.listdir(self.temp_dir.name)) == ["icons-1", "icons-1.tgz"]

        args, kwargs = mock_run.call_args
        command = args[0]
        assert command[:3] == ["npm", "pack", "--pack-destination"]
        assert os.path.dirname(command[3]) == self.temp_dir.name
        assert kwargs["cwd"] == self.source_dir
        assert kwargs["timeout"] == 5
        assert kwargs["check"] is True

    @patch("iconship.component2package.adapters.archivers.subprocess.run")
    def test_staging_directory_removed_on_failure(self, mock_run):
        """
        Test that a failed pack leaves nothing next to the archive.
        """
        def fake_npm(command, **kwargs):
            with open(os.path.join(command[-1], "icons-1.0.0.tgz"), "wb") as f:
                f.write(b"tarball")
            return MagicMock(stdout="other-name.tgz\n")

        mock_run.side_effect = fake_npm

        with pytest.raises(AssemblyError):
            self.archiver.create_archive(self.source_dir, self.archive_path)

        assert os.listdir(self.temp_dir.name) == ["icons-1"]

    def test_concurrent_packs_do_not_collide(self):
        """
        Test that two runs of the same package packing at once each get their own tarball.
        """
        npm_script = os.path.join(self.temp_dir.name, "fake-npm")
        with open(npm_script, "w") as f:
            f.write(
                "#!/bin/sh\n"
                "printf '%s' \"$(basename \"$PWD\")\" > \"$3/icons-1.0.0.tgz\"\n"
                "sleep 0.2\n"
                "echo icons-1.0.0.tgz\n"
            )
        os.chmod(npm_script, 0o755)
        archiver = NpmPackArchiver(timeout=10, npm_executable=npm_script)

        runs = {}
        for run_id in ("run1", "run2"):
            source_dir = os.path.join(self.temp_dir.name, f"icons-{run_id}")
            os.makedirs(source_dir)
            runs[run_id] = (source_dir, os.path.join(self.temp_dir.name, f"icons-{run_id}.tgz"))

        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(archiver.create_archive, source_dir, archive_path)
                for source_dir, archive_path in runs.values()
            ]
            for future in futures:
                future.result()

        for run_id, (source_dir, archive_path) in runs.items():
            with open(archive_path) as f:
                assert f.read() == f"icons-{run_id}"

        assert not [name for name in os.listdir(self.temp_dir.name) if name.startswith(".")]


    @patch("iconship.component2package.adapters.archivers.subprocess.run")
    def test_timeout(self, mock_run):
        """
        Test that a timeout is reported as AssemblyError.
        """
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="npm pack", timeout=5)

        with pytest.raises(AssemblyError) as excinfo:
            self.archiver.create_archive(self.source_dir, self.archive_path)

        assert "timed out" in excinfo.value.message
        assert os.listdir(self.temp_dir.name) == ["icons-1"]

    @patch("iconship.component2package.adapters.archivers.subprocess.run")
    def test_npm_failure(self, mock_run):
        """
        Test that a non-zero exit is reported as AssemblyError.
        """
        mock_run.side_effect = subprocess.CalledProcessError(1, "npm pack", stderr="npm ERR! code E404\n")

        with pytest.raises(AssemblyError) as excinfo:
            self.archiver.create_archive(self.source_dir, self.archive_path)

        assert "exit code 1" in excinfo.value.message
        assert "E404" in excinfo.value.message

    @patch("iconship.component2package.adapters.archivers.subprocess.run")
    def test_npm_missing(self, mock_run):
        """
        Test that a missing npm binary is reported as AssemblyError.
        """
        mock_run.side_effect = FileNotFoundError("npm")

        with pytest.raises(AssemblyError):
            self.archiver.create_archive(self.source_dir, self.archive_path)

    @patch("iconship.component2package.adapters.archivers.subprocess.run")
    def test_no_output(self, mock_run):
        """
        Test that npm output without a tarball name is an error.
        """
        mock_run.return_value = MagicMock(stdout="\n")

        with pytest.raises(AssemblyError):
            self.archiver.create_archive(self.source_dir, self.archive_path)

    def test_get_service_info(self):
        """
        Test the archiver information.
        """
        assert self.archiver.get_service_info() == {
            "name": "NpmPackArchiver",
            "npm_executable": "npm",
            "timeout": 5,
        }


class TestGetArchiver:
    """
    Tests for the get_archiver function.
    """

    def test_get_archiver(self):
        """
        Test selecting archivers by name.
        """
        assert isinstance(get_archiver(), TarballArchiver)
        assert isinstance(get_archiver("TARBALL"), TarballArchiver)

        archiver = get_archiver("npm", timeout=30)
        assert isinstance(archiver, NpmPackArchiver)
        assert archiver.timeout == 30

    def test_unknown_archiver(self):
        """
        Test that an unknown archiver is a configuration error.
        """
        with pytest.raises(ConfigurationError):
            get_archiver("zip")
