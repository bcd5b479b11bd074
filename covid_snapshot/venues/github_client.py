"""
HTTP client for the GitHub contents API.

**Conceptual**: The COVID-19 time series live as CSV files in a public GitHub
repository. The contents API returns each file wrapped in a JSON envelope:

    {
        "name": "time_series_covid19_confirmed_global.csv",
        "encoding": "base64",
        "content": "UHJvdmluY2UvU3RhdGUs...\\n...",
        "download_url": "https://raw.githubusercontent.com/...",
        ...
    }

This module handles the HTTP mechanics (session, headers, timeouts, status
codes) and the envelope unwrapping (JSON, base64). It returns raw bytes and
knows nothing about CSV; parsing is the extractor's job.

**Large files**: The contents API only inlines files up to 1 MB. Bigger files
come back with `"encoding": "none"` and an empty `content`; in that case the
client downloads `download_url` directly.

**Error model**: Every failure is raised as an exception from the hierarchy
below (or requests.Timeout). Nothing here prints or exits; the caller decides
whether a failed fetch is fatal.
"""

import base64
import binascii
import requests
from typing import Any, Dict, Optional

from covid_snapshot.config.settings import GitHubSettings


class GitHubClientError(Exception):
    """
    Base exception for GitHub client errors (network/API failures).

    Callers can catch GitHubClientError to handle every fetch failure, or
    catch a subclass for fine-grained handling.
    """
    pass


class GitHubAuthenticationError(GitHubClientError):
    """
    Raised on 401 Unauthorized / 403 Forbidden.

    **Recovery**: Check GITHUB_TOKEN, or unset it for public repositories.
    """
    pass


class GitHubNotFoundError(GitHubClientError):
    """
    Raised on 404 Not Found (wrong repo, ref or file path).

    **Recovery**: Verify COVID_DATA_REPO, COVID_DATA_REF and the dataset path.
    """
    pass


class GitHubRateLimitError(GitHubClientError):
    """
    Raised when the API rate limit is exhausted.

    GitHub signals this with 429, or with 403 and X-RateLimit-Remaining: 0.
    Anonymous clients get 60 requests/hour.

    **Recovery**: Wait for the reset time or set GITHUB_TOKEN.
    """
    pass


class GitHubServerError(GitHubClientError):
    """Raised when the API returns a 5xx server error."""
    pass


class GitHubDecodeError(GitHubClientError):
    """
    Raised when a response cannot be unwrapped into file bytes.

    Covers invalid JSON, missing envelope fields, unknown encodings and
    invalid base64 content.
    """
    pass


class GitHubContentsClient:
    """
    Thin HTTP client for the GitHub repository contents endpoint.

    **Responsibilities**:
      - Build contents URLs for the configured repository and ref
      - Send default headers (API version, optional Bearer token)
      - Map HTTP status codes to exceptions
      - Unwrap the JSON/base64 envelope into raw bytes

    **NOT responsible for**:
      - Parsing CSV (extractor)
      - Deciding what to display on failure (dashboard / actions)

    Implements the DatasetSource protocol via fetch_dataset().

    **Example usage**:
        >>> from covid_snapshot.config.settings import GitHubSettings
        >>> with GitHubContentsClient(GitHubSettings()) as client:
        ...     content = client.fetch_file_bytes(
        ...         "csse_covid_19_data/csse_covid_19_time_series/"
        ...         "time_series_covid19_deaths_global.csv"
        ...     )
        >>> content[:15]
        b'Province/State,'
    """

    def __init__(self, settings: GitHubSettings):
        """
        Initialize the client with settings.

        Args:
            settings: GitHub configuration (base_url, repo, ref, token, timeout).
        """
        self.settings = settings
        self.session = requests.Session()

        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "covid_snapshot/1.0",
        })
        if self.settings.token:
            self.session.headers["Authorization"] = f"Bearer {self.settings.token}"

    def contents_url(self, path: str) -> str:
        """URL of the contents endpoint for a repository file path."""
        return (
            f"{self.settings.base_url.rstrip('/')}"
            f"/repos/{self.settings.repo}/contents/{path.strip('/')}"
        )

    def get_contents(self, path: str) -> Dict[str, Any]:
        """
        Fetch the JSON envelope describing a repository file.

        **HTTP request details**:
          - Method: GET
          - URL: {base_url}/repos/{repo}/contents/{path}
          - Query params: ref (only if configured)
          - Timeout: From settings (default 30 seconds)

        Args:
            path: File path inside the repository.

        Returns:
            Parsed JSON response as dict.

        Raises:
            ValueError: If path is empty.
            GitHubAuthenticationError: 401/403.
            GitHubNotFoundError: 404.
            GitHubRateLimitError: 429, or 403 with exhausted rate limit.
            GitHubServerError: 5xx.
            GitHubDecodeError: If the body is not a JSON object.
            requests.Timeout: If the request exceeds the timeout.
            GitHubClientError: For other API and connection errors.
        """
        if not path or not path.strip("/ "):
            raise ValueError("Path cannot be empty")

        url = self.contents_url(path)
        params = {"ref": self.settings.ref} if self.settings.ref else None

        response = self._get(url, params=params)
        self._check_status(response, path)

        try:
            data = response.json()
        except ValueError as e:
            raise GitHubDecodeError(
                f"Failed to parse JSON response for '{path}': {e}. Response: {response.text[:200]}"
            ) from e

        if not isinstance(data, dict):
            # Directories come back as a JSON list of entries
            raise GitHubDecodeError(
                f"Expected a file object for '{path}', got {type(data).__name__}. "
                f"Is the path a directory?"
            )

        return data

    def fetch_file_bytes(self, path: str) -> bytes:
        """
        Fetch a repository file and return its raw bytes.

        Unwraps the contents envelope: base64 content is decoded (GitHub wraps
        it with newlines); files too large to inline are downloaded from their
        download_url.

        Args:
            path: File path inside the repository.

        Returns:
            Raw file content.

        Raises:
            GitHubDecodeError: If the envelope is incomplete or content is not
                               valid base64.
            Any exception raised by get_contents().
        """
        envelope = self.get_contents(path)

        encoding = envelope.get("encoding")
        content = envelope.get("content")

        if encoding == "base64":
            if not isinstance(content, str):
                raise GitHubDecodeError(
                    f"Response for '{path}' missing 'content' field. Keys: {list(envelope.keys())}"
                )
            return self.decode_content(content, path)

        if encoding == "none" or (encoding is None and not content):
            download_url = envelope.get("download_url")
            if not download_url:
                raise GitHubDecodeError(
                    f"Response for '{path}' has no inline content and no download_url"
                )
            return self.download(download_url, path)

        raise GitHubDecodeError(
            f"Unsupported content encoding {encoding!r} for '{path}'"
        )

    def fetch_dataset(self, path: str) -> bytes:
        """DatasetSource protocol: raw CSV bytes of a repository file."""
        return self.fetch_file_bytes(path)

    @staticmethod
    def decode_content(content: str, path: str = "") -> bytes:
        """
        Decode the base64 `content` field of a contents envelope.

        Whitespace (GitHub inserts a newline every 60 characters) is removed
        before strict decoding.

        Raises:
            GitHubDecodeError: If the content is not valid base64.
        """
        compact = "".join(content.split())
        try:
            return base64.b64decode(compact, validate=True)
        except (binascii.Error, ValueError) as e:
            raise GitHubDecodeError(
                f"Invalid base64 content for '{path}': {e}"
            ) from e

    def download(self, url: str, path: str = "") -> bytes:
        """
        Download raw bytes from a download_url.

        Raises:
            Same status-code exceptions as get_contents().
        """
        response = self._get(url)
        self._check_status(response, path or url)
        return response.content

    def _get(self, url: str, params: Optional[Dict[str, str]] = None) -> requests.Response:
        """GET with timeout, translating transport errors."""
        try:
            return self.session.get(
                url,
                params=params,
                timeout=self.settings.timeout_seconds,
            )

        except requests.Timeout as e:
            raise requests.Timeout(
                f"Request to GitHub timed out after {self.settings.timeout_seconds}s. "
                f"Check network connection or increase GITHUB_TIMEOUT_SECONDS."
            ) from e

        except requests.ConnectionError as e:
            raise GitHubClientError(
                f"Failed to connect to {url}. Check network connection and GITHUB_API_URL."
            ) from e

        except requests.RequestException as e:
            raise GitHubClientError(
                f"HTTP request failed: {e}"
            ) from e

    @staticmethod
    def _check_status(response: requests.Response, what: str) -> None:
        """Raise the matching exception for a non-2xx response."""
        status = response.status_code

        if status < 400:
            return

        rate_limited = (
            status == 429
            or (status == 403 and response.headers.get("X-RateLimit-Remaining") == "0")
        )
        if rate_limited:
            raise GitHubRateLimitError(
                f"Rate limit exceeded (status {status}). "
                f"Wait for the limit to reset or set GITHUB_TOKEN. Response: {response.text}"
            )

        if status == 401 or status == 403:
            raise GitHubAuthenticationError(
                f"Authentication failed (status {status}). "
                f"Check your GITHUB_TOKEN. Response: {response.text}"
            )

        if status == 404:
            raise GitHubNotFoundError(
                f"'{what}' not found. Response: {response.text}"
            )

        if status >= 500:
            raise GitHubServerError(
                f"GitHub server error (status {status}). Response: {response.text}"
            )

        raise GitHubClientError(
            f"Client error (status {status}). "
            f"Request may be malformed. Response: {response.text}"
        )

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.session.close()

    def __enter__(self):
        """Enable context manager support (with statement)."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Clean up session when exiting context manager."""
        self.close()
        return False  # Don't suppress exceptions
