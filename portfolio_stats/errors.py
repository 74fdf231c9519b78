"""Exceptions raised by the upstream clients."""


class UpstreamError(Exception):
    """An upstream call failed (network, timeout, HTTP status or bad payload)."""

    def __init__(self, upstream: str, message: str):
        super().__init__(f"{upstream}: {message}")
        self.upstream = upstream


class CredentialMissing(UpstreamError):
    """The call needs a credential that is not configured."""
