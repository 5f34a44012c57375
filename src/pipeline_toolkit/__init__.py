"""
CI/CD pipeline toolkit: retrying execution for flaky pipeline steps.

Wraps remote review services and package tooling behind component actions
whose failures are retried with exponential backoff and jitter:
- Automerge of pull requests (observe then merge, stage-aware classification)
- Install verification of freshly published npm packages

Architecture: generic RetryEngine + classifying workflows + Celery tasks
"""

__version__ = "0.1.0"
