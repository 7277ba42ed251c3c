"""
Configuration management for the workspace bootstrapper.

Provides centralized configuration for acquisition, retry and installation
with sensible defaults, JSON persistence and environment overrides.
"""

import os
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from dotenv import find_dotenv, load_dotenv

from repobootstrap.core.exceptions import ConfigurationError


@dataclass
class AcquisitionConfig:
    """Configuration for repository acquisition."""

    # Repositories cloned by default, in install order
    repositories: List[str] = field(default_factory=lambda: [
        "archinfo", "pyvex", "cle", "claripy", "ailment",
        "angr", "angr-doc", "binaries",
    ])

    # Extra default repositories keyed by OS name
    platform_repositories: Dict[str, List[str]] = field(default_factory=lambda: {
        "linux": ["archr"],
    })

    # Repositories keyed by interpreter name, added even without defaults
    interpreter_repositories: Dict[str, List[str]] = field(default_factory=lambda: {
        "cpython": ["angr-management"],
    })

    # Remote bases in fallback priority order
    remotes: List[str] = field(default_factory=lambda: [
        "https://github.com/angr",
        "https://github.com/shellphish",
        "https://github.com/mechaphish",
        "https://git:@github.com/zardus",
        "https://git:@github.com/rhelmot",
        "https://git:@github.com/salls",
        "https://git:@github.com/lukas-dresel",
        "https://git:@github.com/mborgerson",
    ])

    # Clone repositories concurrently
    concurrent: bool = False

    # Fetch only the latest commit of each branch
    shallow: bool = False

    # Initialize submodules while cloning
    recursive: bool = True

    # Worker threads for concurrent cloning (0 = one per repository)
    max_workers: int = 0

    # Timeout for a single git command in seconds (0 = no timeout)
    git_timeout: int = 0

    # Branch to check out across all repositories after cloning
    branch: Optional[str] = None


@dataclass
class RetryConfig:
    """Configuration for retrying transient transport failures."""

    # Retries of the same URL after the first try (0 = never retry)
    max_retries: int = 8

    # Upper bound of the randomized sleep between retries, in seconds
    max_jitter: float = 4.0

    # Stop retrying a URL after this many seconds (0 = no deadline)
    max_duration: float = 0.0

    # Output patterns identifying a server-side handshake reset
    transient_patterns: List[str] = field(default_factory=lambda: [
        r"(ssh|kex)_exchange_identification: read: Connection reset by peer",
        r"(ssh|kex)_exchange_identification: Connection closed by remote host",
    ])


@dataclass
class InstallConfig:
    """Configuration for the installation phase."""

    # Run the installation phase after cloning
    enabled: bool = True

    # Packages installed before a repository's own editable install
    extra_dependencies: Dict[str, List[str]] = field(default_factory=lambda: {
        "angr": ["sqlalchemy", "unicorn==2.0.1.post1"],
        "pyvex": ["--pre", "capstone"],
    })

    # Options passed to every pip invocation
    pip_options: List[str] = field(default_factory=list)

    # Install repositories with --no-build-isolation
    no_build_isolation: bool = True

    # Build tooling installed before any repository
    build_prerequisites: List[str] = field(default_factory=lambda: [
        "-U", "pip", "setuptools==64.0.1", "wheel", "cffi",
        "unicorn==2.0.1.post1", "cmake", "ninja",
    ])

    # Development helpers installed after all repositories
    post_install_packages: List[str] = field(default_factory=lambda: [
        "-U", "ipython", "pylint", "ipdb", "nose", "nose-timer", "coverage",
        "flaky", "keystone-engine",
        "git+https://github.com/eliben/pyelftools#egg=pyelftools",
    ])


@dataclass
class BootstrapConfig:
    """Master configuration combining all phase configurations."""

    acquisition: AcquisitionConfig = field(default_factory=AcquisitionConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    installation: InstallConfig = field(default_factory=InstallConfig)

    # Enable verbose logging
    verbose: bool = False

    # Directory holding one subdirectory per repository
    workspace_dir: str = "."

    # Directory for run checkpoints, relative to the workspace
    state_dir: str = ".bootstrap"

    @property
    def workspace_path(self) -> Path:
        return Path(self.workspace_dir)

    @property
    def state_path(self) -> Path:
        return self.workspace_path / self.state_dir


def resolve_repository_names(
    config: BootstrapConfig,
    platform_tags: Iterable[str] = (),
    extra: Iterable[str] = (),
    include_defaults: bool = True,
) -> List[str]:
    """
    Compute the ordered list of repositories to acquire.

    Args:
        config: Bootstrap configuration.
        platform_tags: Tags describing the host, e.g. ("linux", "cpython").
            Interpreter repositories follow the extras and are kept when
            defaults are excluded.
        extra: Additional repositories requested by the user.
        include_defaults: Whether to start from the configured repository list.

    Returns:
        Repository names with duplicates removed, first occurrence kept.
    """
    names: List[str] = []
    if include_defaults:
        names.extend(config.acquisition.repositories)
        for tag in platform_tags:
            names.extend(config.acquisition.platform_repositories.get(tag, []))
    names.extend(extra)
    for tag in platform_tags:
        names.extend(config.acquisition.interpreter_repositories.get(tag, []))

    ordered: List[str] = []
    for name in names:
        if name not in ordered:
            ordered.append(name)
    return ordered


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables, a .env file and
    JSON configuration files.
    """

    _instance: Optional["Config"] = None
    _config: BootstrapConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = BootstrapConfig()
        return cls._instance

    @classmethod
    def get(cls) -> BootstrapConfig:
        """Get the current bootstrap configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> BootstrapConfig:
        """Discard the current configuration and restore the defaults."""
        instance = cls()
        instance._config = BootstrapConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> BootstrapConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded BootstrapConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Invalid configuration file {config_path}: {e}",
                    details={"path": str(config_path)},
                ) from e

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, dotenv_path: Optional[str] = None) -> BootstrapConfig:
        """
        Load configuration overrides from the environment.

        Variables are read from the process environment after a .env file
        (given, or found from the working directory upwards) has been loaded. All variables are prefixed with BOOTSTRAP_;
        list values are whitespace separated.

        Returns:
            BootstrapConfig with environment overrides applied.
        """
        dotenv_file = dotenv_path or find_dotenv(usecwd=True)
        if dotenv_file:
            load_dotenv(dotenv_file)

        instance = cls()
        config = instance._config

        if os.getenv("BOOTSTRAP_REPOS") is not None:
            config.acquisition.repositories = os.getenv("BOOTSTRAP_REPOS").split()

        if os.getenv("BOOTSTRAP_REMOTES") is not None:
            config.acquisition.remotes = os.getenv("BOOTSTRAP_REMOTES").split()

        if os.getenv("BOOTSTRAP_WORKSPACE"):
            config.workspace_dir = os.getenv("BOOTSTRAP_WORKSPACE")

        if os.getenv("BOOTSTRAP_MAX_RETRIES"):
            try:
                config.retry.max_retries = int(os.getenv("BOOTSTRAP_MAX_RETRIES"))
            except ValueError as e:
                raise ConfigurationError(
                    "BOOTSTRAP_MAX_RETRIES must be an integer",
                    details={"value": os.getenv("BOOTSTRAP_MAX_RETRIES")},
                ) from e

        if os.getenv("BOOTSTRAP_VERBOSE"):
            config.verbose = os.getenv("BOOTSTRAP_VERBOSE").lower() in ("true", "1", "yes")

        return config

    @staticmethod
    def _dict_to_config(data: dict) -> BootstrapConfig:
        """Convert a dictionary to BootstrapConfig."""
        config = BootstrapConfig()

        try:
            if "acquisition" in data:
                config.acquisition = AcquisitionConfig(**data["acquisition"])

            if "retry" in data:
                config.retry = RetryConfig(**data["retry"])

            if "installation" in data:
                config.installation = InstallConfig(**data["installation"])
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}") from e

        for key in ("verbose", "workspace_dir", "state_dir"):
            if key in data:
                setattr(config, key, data[key])

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            json.dump(asdict(cls.get()), f, indent=2)
