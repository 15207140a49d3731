"""Fetcher for event data published as a GitHub release asset."""
import json
import logging
from typing import Any, List

import requests

from fetcher.exceptions import (
    AssetNotFoundError,
    HttpStatusError,
    ParseError,
    TransportError,
)
from processor.models import RawEvent, Release, ReleaseAsset

logger = logging.getLogger(__name__)


class GitHubReleaseFetcher:
    """Downloads the events JSON asset from the latest release of a repository."""

    DEFAULT_API_BASE = "https://api.github.com"
    USER_AGENT = "SRRC-Calendar-API/1.0"
    MAX_RESPONSE_BYTES = 10 * 1024 * 1024

    def __init__(
        self,
        repository: str,
        asset_name: str,
        timeout: int = 30,
        api_base: str = DEFAULT_API_BASE,
        max_response_bytes: int = MAX_RESPONSE_BYTES
    ):
        """
        Initialize the release fetcher.

        Args:
            repository: Repository identifier in "owner/name" form
            asset_name: Exact file name of the events asset
            timeout: HTTP request timeout in seconds (default: 30)
            api_base: Base URL of the releases API
            max_response_bytes: Largest accepted response body (default: 10 MB)
        """
        self.repository = repository
        self.asset_name = asset_name
        self.timeout = timeout
        self.api_base = api_base.rstrip('/')
        self.max_response_bytes = max_response_bytes

    def fetch_events(self) -> List[RawEvent]:
        """
        Fetch raw events from the latest release.

        Returns:
            List of RawEvent objects, empty if the asset holds no events

        Raises:
            TransportError: Network failure, timeout or non-success status
            AssetNotFoundError: Latest release lacks the configured asset
            ParseError: Malformed JSON from either endpoint
        """
        logger.info(f"Fetching events from GitHub repository: {self.repository}")

        release = self.get_latest_release()

        asset = release.find_asset(self.asset_name)
        if asset is None:
            raise AssetNotFoundError(self.repository, self.asset_name)

        logger.info(f"Found asset: {asset.name} ({asset.size} bytes)")

        events = self.download_events(asset.browser_download_url)

        logger.info(f"Successfully fetched {len(events)} events from GitHub")
        return events

    def get_latest_release(self) -> Release:
        """
        Resolve the latest release of the configured repository.

        Returns:
            Release with its asset list
        """
        url = f"{self.api_base}/repos/{self.repository}/releases/latest"
        logger.debug(f"Fetching latest release from: {url}")

        payload = self._get_json(url, accept="application/vnd.github+json")
        return self._parse_release(payload)

    def download_events(self, download_url: str) -> List[RawEvent]:
        """
        Download and parse the events JSON asset.

        Args:
            download_url: Direct download URL of the asset

        Returns:
            List of RawEvent objects
        """
        logger.debug(f"Downloading events JSON from: {download_url}")

        payload = self._get_json(download_url, accept="application/json")
        if payload is None:
            return []

        if not isinstance(payload, list):
            raise ParseError(
                f"Expected a JSON array of events, got {type(payload).__name__}"
            )

        events = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise ParseError(
                    f"Event at index {index} is not a JSON object"
                )
            events.append(RawEvent.from_dict(item))

        return events

    def _get_json(self, url: str, accept: str) -> Any:
        """
        Issue a GET request and decode the JSON body.

        The body is streamed and capped at max_response_bytes. An empty body
        decodes to None.
        """
        headers = {
            'Accept': accept,
            'User-Agent': self.USER_AGENT
        }

        try:
            with requests.get(url, headers=headers, timeout=self.timeout, stream=True) as response:
                response.raise_for_status()
                body = self._read_body(response, url)
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"Upstream returned HTTP {status_code} for {url}")
            raise HttpStatusError(
                f"Upstream returned HTTP {status_code} for {url}",
                status_code=status_code,
                url=url
            ) from e
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(f"Request to {url} failed: {e}") from e

        if not body.strip():
            return None

        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(f"Malformed JSON from {url}: {e}") from e

    def _read_body(self, response: requests.Response, url: str) -> bytes:
        """Read a streamed body, failing once it exceeds max_response_bytes."""
        declared = response.headers.get('Content-Length')
        if declared and declared.isdigit() and int(declared) > self.max_response_bytes:
            raise ParseError(
                f"Response from {url} is {declared} bytes, "
                f"limit is {self.max_response_bytes}"
            )

        body = bytearray()
        for chunk in response.iter_content(chunk_size=64 * 1024):
            body.extend(chunk)
            if len(body) > self.max_response_bytes:
                raise ParseError(
                    f"Response from {url} exceeds {self.max_response_bytes} bytes"
                )
        return bytes(body)

    def _parse_release(self, payload: Any) -> Release:
        """
        Convert the latest-release payload into a Release.

        Args:
            payload: Decoded JSON body

        Returns:
            Release object
        """
        if not isinstance(payload, dict):
            raise ParseError("Latest release payload is not a JSON object")

        raw_assets = payload.get('assets') or []
        if not isinstance(raw_assets, list):
            raise ParseError("Release 'assets' field is not a list")

        assets = []
        for item in raw_assets:
            if not isinstance(item, dict):
                raise ParseError("Release asset is not a JSON object")
            assets.append(
                ReleaseAsset(
                    id=item.get('id') or 0,
                    name=item.get('name') or '',
                    browser_download_url=item.get('browser_download_url') or '',
                    size=item.get('size') or 0,
                    content_type=item.get('content_type') or ''
                )
            )

        return Release(
            id=payload.get('id') or 0,
            name=payload.get('name') or '',
            tag_name=payload.get('tag_name') or '',
            assets=assets,
            published_at=payload.get('published_at') or ''
        )
