"""
Custom exceptions for the workspace bootstrapper.

Provides a hierarchy of exceptions for the acquisition and installation
phases, so transport problems can be handled close to where they occur
while whole-run failures are reported once, with their logs intact.
"""

from typing import List, Optional


class BootstrapError(Exception):
    """Base exception for all bootstrap-related errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg

    @property
    def log(self) -> Optional[str]:
        """Captured tool output attached to this error, if any."""
        return self.details.get("log")


class ConfigurationError(BootstrapError):
    """Raised when the configuration is invalid."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Configuration", details=details)


class AcquisitionError(BootstrapError):
    """Raised when repository acquisition fails."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Acquisition", details=details)


class TransientTransportError(AcquisitionError):
    """The remote dropped the connection during the handshake; retry the same URL."""

    def __init__(self, url: str, output: str):
        super().__init__(
            f"Transient transport failure for {url}",
            details={"url": url, "log": output},
        )
        self.url = url


class RemoteUnavailableError(AcquisitionError):
    """A single remote could not provide the repository."""

    def __init__(self, url: str, output: str, message: str = None):
        super().__init__(
            message or f"Remote unavailable: {url}",
            details={"url": url, "log": output},
        )
        self.url = url


class RetryExhaustedError(RemoteUnavailableError):
    """Transient failures kept recurring until the retry budget ran out."""

    def __init__(self, url: str, output: str, tries: int):
        super().__init__(
            url,
            output,
            message=f"Gave up on {url} after {tries} attempts",
        )
        self.tries = tries
        self.details["tries"] = tries


class RepositoryAcquisitionFailure(AcquisitionError):
    """
    One or more repositories could not be fetched from any remote.

    Carries the full ordered result list so callers can report the status
    of every repository, not only the failed ones.
    """

    def __init__(self, results: List):
        self.results = list(results)
        self.failures = [r for r in self.results if not r.available]
        names = ", ".join(r.name for r in self.failures)
        super().__init__(
            f"Failed to clone {names}",
            details={
                "repositories": [r.name for r in self.failures],
                "log": "\n".join(r.error_log or "" for r in self.failures),
            },
        )


class InstallFailure(BootstrapError):
    """Raised when the package installer reports a failure."""

    def __init__(self, target: str, output: str):
        super().__init__(
            f"pip failure ({target})",
            stage="Installation",
            details={"target": target, "log": output},
        )
        self.target = target
