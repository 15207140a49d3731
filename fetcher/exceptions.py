"""Errors raised while talking to the upstream release feed."""
from typing import Optional


class UpstreamError(Exception):
    """Base class for every failure of the release fetcher."""


class TransportError(UpstreamError):
    """Network failure or timeout while calling the upstream API."""


class HttpStatusError(TransportError):
    """Upstream answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class AssetNotFoundError(UpstreamError):
    """Latest release does not contain the configured asset."""

    def __init__(self, repository: str, asset_name: str):
        super().__init__(
            f"Asset '{asset_name}' not found in latest release of {repository}"
        )
        self.repository = repository
        self.asset_name = asset_name


class ParseError(UpstreamError):
    """Upstream returned malformed JSON or an unexpected payload shape."""
