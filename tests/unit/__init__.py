"""
Unit tests for the CI pipeline toolkit.

Test individual components in isolation:
- Retry policy and engine (backoff, jitter, limits, hooks)
- Failure classification (Observe vs Act)
- Workflows (automerge, install verification, outcomes)
- GitHub client (httpx MockTransport)
- Celery tasks (patched collaborators)
- Logging processors
"""
