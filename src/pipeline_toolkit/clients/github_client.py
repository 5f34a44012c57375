"""
GitHub client implementation for pull request automerge.

Communicates with the GitHub REST API using httpx AsyncClient:
- GET /repos/{owner}/{repo}/pulls/{number}: current pull request state
- PUT /repos/{owner}/{repo}/pulls/{number}/merge: merge pinned to a head SHA

Transport failures are surfaced as TransportError carrying the status code;
deciding whether to retry is left to the caller.
"""

import json
from typing import Any, Dict, Optional
import httpx
import structlog

from pipeline_toolkit.clients.base_client import BaseReviewClient
from pipeline_toolkit.clients.exceptions import TransportError
from pipeline_toolkit.config import Settings
from pipeline_toolkit.models.review_models import ChangeSnapshot, MergeResult


logger = structlog.get_logger(__name__)


class GitHubReviewClient(BaseReviewClient):
    """
    GitHub pull request client using httpx for async HTTP communication.

    Features:
    - Connection pooling via persistent AsyncClient
    - Token authentication (optional, for public read access)
    - Timeouts reported as status 408 so they classify as transient
    """

    def __init__(
        self,
        owner: str,
        repository: str,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        timeout: int = 30,
        merge_method: str = "merge",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize GitHub client.

        Args:
            owner: Repository owner (user or organization)
            repository: Repository name
            token: GitHub token used for authentication
            base_url: GitHub API URL (override for GitHub Enterprise)
            timeout: Request timeout in seconds
            merge_method: merge, squash or rebase
            transport: Custom httpx transport (mock transports in tests)
        """
        super().__init__(base_url, timeout)
        self.owner = owner
        self.repository = repository
        self.merge_method = merge_method
        self._token = token
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "GitHubReviewClient":
        """Build a client from application settings; `kwargs` (e.g. transport) are passed through."""
        return cls(
            owner=settings.REPOSITORY_OWNER,
            repository=settings.REPOSITORY_NAME,
            token=settings.GITHUB_TOKEN,
            base_url=settings.GITHUB_API_URL,
            timeout=settings.GITHUB_TIMEOUT,
            merge_method=settings.MERGE_METHOD,
            **kwargs
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"

            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                transport=self._transport,
                follow_redirects=True,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    def _pull_path(self, change_id: int) -> str:
        return f"/repos/{self.owner}/{self.repository}/pulls/{change_id}"

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body."""
        try:
            client = await self._get_client()
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            logger.warning("GitHub request timeout", method=method, path=path, timeout=self.timeout)
            raise TransportError(
                f"Request timeout after {self.timeout}s",
                status_code=408,
                details={"method": method, "path": path, "error": str(e)},
            ) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(
                "GitHub HTTP error",
                method=method,
                path=path,
                status_code=status_code,
            )
            raise TransportError(
                f"GitHub {method} {path} failed with status {status_code}",
                status_code=status_code,
                details={"body": e.response.text},
            ) from e

        except httpx.HTTPError as e:
            logger.warning("GitHub network error", method=method, path=path, error=str(e))
            raise TransportError(
                f"Network error: {str(e)}",
                details={"method": method, "path": path, "error_type": type(e).__name__},
            ) from e

        except json.JSONDecodeError as e:
            raise TransportError(
                "Invalid JSON response from GitHub",
                status_code=response.status_code,
                details={"parse_error": str(e)},
            ) from e

    async def fetch(self, change_id: int) -> ChangeSnapshot:
        """GET the pull request and map it to a ChangeSnapshot."""
        data = await self._request("GET", self._pull_path(change_id))

        snapshot = ChangeSnapshot(
            state=data["state"],
            head_ref=data["head"]["sha"],
            merged=bool(data.get("merged")),
            draft=bool(data.get("draft")),
        )
        logger.debug(
            "Fetched pull request",
            change_id=change_id,
            state=snapshot.state.value,
            head_ref=snapshot.head_ref,
            merged=snapshot.merged,
            draft=snapshot.draft,
        )
        return snapshot

    async def merge(self, change_id: int, head_ref: str) -> MergeResult:
        """PUT the merge request pinned to `head_ref`."""
        data = await self._request(
            "PUT",
            f"{self._pull_path(change_id)}/merge",
            json={"sha": head_ref, "merge_method": self.merge_method},
        )
        return MergeResult(applied=bool(data.get("merged")), message=data.get("message", ""))

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
