"""
Data model shared by the pipeline stages.

Every record here is immutable once created, except PackageLayout whose
archive_path is filled in by the assembler after archiving.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from iconship.core.constants import (
    UNTYPED_EXTENSION,
    TYPED_EXTENSION,
    DECLARATION_EXTENSION,
)


@dataclass(frozen=True)
class RawAsset:
    """One icon image as delivered by the icon service."""

    name: str
    markup: str


@dataclass(frozen=True)
class ComponentArtifactSet:
    """Generated sources for one asset."""

    identifier: str
    untyped_source: str
    typed_source: str
    declaration_source: str
    untyped_export_line: str
    typed_export_line: str

    @property
    def untyped_filename(self) -> str:
        return f"{self.identifier}{UNTYPED_EXTENSION}"

    @property
    def typed_filename(self) -> str:
        return f"{self.identifier}{TYPED_EXTENSION}"

    @property
    def declaration_filename(self) -> str:
        return f"{self.identifier}{DECLARATION_EXTENSION}"


@dataclass(frozen=True)
class PackageManifest:
    name: str
    version: str
    entry_points: Dict[str, str]
    peer_requirements: Dict[str, str]
    author: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Render the manifest as a package.json document.

        Returns:
            Dict[str, Any]: The package.json content
        """
        document = {
            "name": self.name,
            "version": self.version,
            "main": self.entry_points["untyped"],
            "source": self.entry_points["typed"],
            "types": self.entry_points["declarations"],
            "files": ["dist"],
            "peerDependencies": dict(self.peer_requirements),
        }
        if self.author:
            document["author"] = self.author
        return document


@dataclass
class PackageLayout:
    """
    On-disk package tree for one run.

    Owned by the assembler while it is written and released by the
    publisher's cleanup step.
    """

    root_dir: str
    untyped_dir: str
    typed_dir: str
    manifest_path: str
    run_id: str
    archive_path: Optional[str] = None


@dataclass(frozen=True)
class ErrorInfo:
    classification: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"classification": self.classification, "message": self.message}


@dataclass(frozen=True)
class PublishResult:
    succeeded: bool
    remote_reference: Optional[str] = None
    error: Optional[ErrorInfo] = None


@dataclass(frozen=True)
class RunResult:
    """The single outcome reported for one pipeline run."""

    succeeded: bool
    message: str
    package_name: Optional[str] = None
    version: Optional[str] = None
    asset_count: int = 0
    remote_reference: Optional[str] = None
    error: Optional[ErrorInfo] = None
    timings: Dict[str, float] = field(default_factory=dict)
