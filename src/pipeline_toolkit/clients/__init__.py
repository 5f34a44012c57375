"""
External collaborators wrapped by the workflows.

- base_client.py: Review service interface (fetch / merge)
- github_client.py: GitHub REST implementation (httpx)
- subprocess_runner.py: Async subprocess execution
"""

from pipeline_toolkit.clients.base_client import BaseReviewClient
from pipeline_toolkit.clients.exceptions import ClientError, CommandError, TransportError
from pipeline_toolkit.clients.github_client import GitHubReviewClient
from pipeline_toolkit.clients.subprocess_runner import SubprocessRunner

__all__ = [
    "BaseReviewClient",
    "ClientError",
    "CommandError",
    "GitHubReviewClient",
    "SubprocessRunner",
    "TransportError",
]
