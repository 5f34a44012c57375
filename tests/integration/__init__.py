"""
Integration tests for the CI pipeline toolkit.

Test components against real external tools:
- SubprocessRunner (real child processes via the current interpreter)
- Install verification (real npm, skipped when npm/node are missing)
"""
