"""
Data structures shared by the acquisition and installation phases.

Requests, results and install tasks are immutable: each is produced once
and handed downstream without modification.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple


@dataclass(frozen=True)
class RemoteCatalog:
    """Ordered remote base locations; earlier entries are tried first."""

    remotes: Tuple[str, ...] = ()

    @classmethod
    def from_remotes(
        cls, defaults: Iterable[str], preferred: Iterable[str] = ()
    ) -> "RemoteCatalog":
        """
        Build a catalog with preferred remotes ahead of the defaults.

        Args:
            defaults: Default remote bases, in priority order.
            preferred: User-supplied remote bases, tried before the defaults.

        Returns:
            RemoteCatalog with duplicates collapsed to their first position.
        """
        ordered = []
        for remote in list(preferred) + list(defaults):
            if remote and remote not in ordered:
                ordered.append(remote)
        return cls(remotes=tuple(ordered))

    @staticmethod
    def url_for(remote: str, name: str) -> str:
        return f"{remote.rstrip('/')}/{name}"

    def __iter__(self) -> Iterator[str]:
        return iter(self.remotes)

    def __len__(self) -> int:
        return len(self.remotes)


@dataclass(frozen=True)
class RepositoryRequest:
    """A repository to acquire into the workspace."""

    name: str
    already_present: bool = False

    @classmethod
    def from_workspace(cls, name: str, workspace_dir: Path) -> "RepositoryRequest":
        return cls(name=name, already_present=(Path(workspace_dir) / name).exists())


class CloneOutcome(Enum):
    """Terminal outcome of acquiring one repository."""
    SKIPPED = "skipped"
    CLONED = "cloned"
    FAILED = "failed"

    @property
    def is_available(self) -> bool:
        return self is not CloneOutcome.FAILED


@dataclass(frozen=True)
class RepositoryResult:
    """Result of acquiring one repository."""

    name: str
    outcome: CloneOutcome
    error_log: Optional[str] = None
    remote: Optional[str] = None
    attempts: int = 0

    @property
    def available(self) -> bool:
        return self.outcome.is_available

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "outcome": self.outcome.value,
            "remote": self.remote,
            "attempts": self.attempts,
            "error_log": self.error_log,
        }


class ManifestKind(Enum):
    """Packaging manifest found at the root of a repository."""
    SETUP_PY = "setup.py"
    PYPROJECT_TOML = "pyproject.toml"
    NONE = "none"

    @classmethod
    def probe_order(cls) -> Tuple["ManifestKind", ...]:
        return (cls.SETUP_PY, cls.PYPROJECT_TOML)


ExtraDependencySpec = Mapping[str, Tuple[str, ...]]


def freeze_extra_dependencies(
    mapping: Optional[Mapping[str, Iterable[str]]],
) -> ExtraDependencySpec:
    """Return a read-only copy of a name -> dependency specifiers mapping."""
    frozen = {name: tuple(specs) for name, specs in (mapping or {}).items()}
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class InstallTask:
    """A repository scheduled for an editable install."""

    repository_name: str
    path: Path
    manifest_kind: ManifestKind
    extra_deps: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        return {
            "repository": self.repository_name,
            "path": str(self.path),
            "manifest": self.manifest_kind.value,
            "extra_deps": list(self.extra_deps),
        }
