"""
Abstract base client for change-review services.

Defines the interface the automerge workflow depends on. Concrete clients
(GitHub, test doubles) translate provider payloads into ChangeSnapshot and
MergeResult and raise TransportError for failed calls.
"""

from abc import ABC, abstractmethod
import structlog

from pipeline_toolkit.models.review_models import ChangeSnapshot, MergeResult


logger = structlog.get_logger(__name__)


class BaseReviewClient(ABC):
    """
    Abstract base class for remote change-review clients.

    Responsibilities:
    - Fetch the current state of a change
    - Request a merge pinned to a head commit
    - Translate transport failures into TransportError with a status code

    Does NOT handle:
    - Retrying (that's RetryEngine's job)
    - Deciding whether a failure is transient (that's the workflow's job)
    """

    def __init__(self, base_url: str, timeout: int = 30):
        """
        Initialize base client.

        Args:
            base_url: Base URL of the review service API
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

        logger.info(
            "Initialized review client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    @abstractmethod
    async def fetch(self, change_id: int) -> ChangeSnapshot:
        """
        Fetch the current state of a change.

        Raises:
            TransportError: Call failed (status code attached when known)
        """
        pass

    @abstractmethod
    async def merge(self, change_id: int, head_ref: str) -> MergeResult:
        """
        Merge the change, pinned to `head_ref`.

        Returns MergeResult(applied=False) when the remote answered without
        merging. A stale `head_ref` surfaces as TransportError(409).

        Raises:
            TransportError: Call failed (status code attached when known)
        """
        pass

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
        pass
