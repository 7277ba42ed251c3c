"""
Input validation utilities.

Provides validation functions for repository names, remote bases and
extra dependency options given on the command line.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

_REPO_NAME = re.compile(r"^[A-Za-z0-9_.][A-Za-z0-9_.\-]*$")
_SCP_LIKE = re.compile(r"^[\w.\-]+@[\w.\-]+:.*$")


def validate_repository_name(name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a repository name used as a workspace subdirectory.

    Args:
        name: Repository name.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not name:
        return False, "Repository name cannot be empty"

    if name in (".", ".."):
        return False, f"Invalid repository name: {name}"

    if not _REPO_NAME.match(name):
        return False, f"Repository name contains invalid characters: {name}"

    return True, None


def validate_remote(remote: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a remote base such as ``https://github.com/angr``.

    Accepts URLs with a scheme understood by git, scp-like SSH locations
    (``git@github.com:angr``) and absolute local paths.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not remote:
        return False, "Remote cannot be empty"

    if _SCP_LIKE.match(remote) or remote.startswith("/"):
        return True, None

    parsed = urlparse(remote)
    if parsed.scheme in ("http", "https", "git", "ssh", "file"):
        if parsed.netloc or parsed.scheme == "file":
            return True, None

    return False, f"Invalid remote base: {remote}"


def parse_extra_dependencies(values: Iterable[str]) -> Dict[str, List[str]]:
    """
    Parse ``NAME=SPEC [SPEC ...]`` options into a dependency mapping.

    Repeated names accumulate their specifiers in order.

    Raises:
        ValueError: If an entry has no ``=`` or an empty name.
    """
    mapping: Dict[str, List[str]] = {}
    for value in values:
        name, sep, specs = value.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Expected NAME=SPEC, got: {value}")
        mapping.setdefault(name, []).extend(specs.split())
    return mapping
