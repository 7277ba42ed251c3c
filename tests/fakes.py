"""
Test doubles for the git and pip collaborators.
"""

import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

from repobootstrap.acquisition.git_handler import FetchResult, GitHandler
from repobootstrap.core.config import AcquisitionConfig, InstallConfig
from repobootstrap.core.exceptions import InstallFailure
from repobootstrap.installation.installer import PipInstaller

OK = FetchResult(0, "Cloning into 'repo'...\n")
NOT_FOUND = FetchResult(128, "fatal: repository not found\n")
RESET = FetchResult(
    128,
    "ssh_exchange_identification: read: Connection reset by peer\n"
    "fatal: Could not read from remote repository.\n",
)
CLOSED = FetchResult(
    128,
    "kex_exchange_identification: Connection closed by remote host\n"
    "fatal: Could not read from remote repository.\n",
)


class FakeGitHandler(GitHandler):
    """
    Scripted git collaborator.

    ``outcomes`` maps a URL to the results returned by successive clones of
    that URL; the last result repeats. Unknown URLs are not found.
    """

    def __init__(
        self,
        outcomes: Optional[Dict[str, List[FetchResult]]] = None,
        files: Optional[Dict[str, List[str]]] = None,
        delays: Optional[Dict[str, float]] = None,
        checkout_ok: bool = True,
    ):
        super().__init__(AcquisitionConfig())
        self.outcomes = {url: list(results) for url, results in (outcomes or {}).items()}
        self.files = files or {}
        self.delays = delays or {}
        self.checkout_ok = checkout_ok
        self.calls: List[str] = []
        self.checkouts: List[tuple] = []
        self._lock = threading.Lock()

    def clone(self, url: str, destination: Path) -> FetchResult:
        with self._lock:
            self.calls.append(url)
            queue = self.outcomes.get(url)
            if not queue:
                result = NOT_FOUND
            elif len(queue) > 1:
                result = queue.pop(0)
            else:
                result = queue[0]

        if url in self.delays:
            time.sleep(self.delays[url])

        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        if result.ok:
            for filename in self.files.get(destination.name, []):
                (destination / filename).write_text("")
        return result

    def checkout(self, repo_path: Path, branch: str) -> FetchResult:
        self.checkouts.append((Path(repo_path).name, branch))
        if self.checkout_ok:
            return FetchResult(0, f"Switched to branch '{branch}'\n")
        return FetchResult(1, f"error: pathspec '{branch}' did not match\n")


class RecordingInstaller(PipInstaller):
    """Records pip invocations instead of running them."""

    def __init__(self, fail_on: Optional[str] = None):
        super().__init__(InstallConfig(), python_executable="python")
        self.fail_on = fail_on
        self.calls: List[tuple] = []

    def install_packages(self, specifiers) -> str:
        self.calls.append(("packages", tuple(specifiers)))
        return ""

    def install_editable(self, repo_path: Path) -> str:
        name = Path(repo_path).name
        self.calls.append(("editable", name))
        if name == self.fail_on:
            raise InstallFailure(str(repo_path), "error: subprocess-exited-with-error\n")
        return ""
