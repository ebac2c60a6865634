"""GitHub API client for fetching releases."""

import json
import logging
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from release_db.errors import UpstreamFetchError

logger = logging.getLogger(__name__)


class GitHubAPI:
    """Minimal GitHub REST client.

    Each call is a single attempt: any failure surfaces as
    UpstreamFetchError and is never retried.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        timeout: int = 30,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(self, endpoint: str) -> dict | list:
        """Make an (optionally authenticated) request to GitHub API."""
        url = f"{self.base_url}/{endpoint}"
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "release-db",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug("GET %s", url)
        req = Request(url, headers=headers)
        try:
            with urlopen(req, timeout=self.timeout) as response:
                return json.loads(response.read().decode())
        except HTTPError as e:
            body = e.read().decode(errors="replace") if e.fp else ""
            if e.code == 404:
                raise UpstreamFetchError(f"Repository or release not found: {endpoint}") from e
            if e.code == 403:
                raise UpstreamFetchError(
                    "Rate limit exceeded. Set GITHUB_TOKEN env var for higher limits."
                ) from e
            raise UpstreamFetchError(f"GitHub API error: {e.code} - {body}") from e
        except URLError as e:
            raise UpstreamFetchError(f"GitHub API unreachable: {e.reason}") from e
        except (TimeoutError, ValueError) as e:
            raise UpstreamFetchError(f"GitHub API request failed: {e}") from e

    def get_releases(self, owner: str, repo: str, per_page: int = 30) -> list[dict]:
        """Get releases for a repository, newest first."""
        releases = self._request(f"repos/{owner}/{repo}/releases?per_page={per_page}")
        if not isinstance(releases, list):
            raise UpstreamFetchError(f"Unexpected release listing for {owner}/{repo}")
        return releases
