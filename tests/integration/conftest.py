"""Integration test fixtures (tool checks and prerequisites).

Provides fixtures for checking if external tools are available.
Integration tests are skipped if required tools are not installed.
"""

import shutil

import pytest


@pytest.fixture(scope="session")
def check_npm():
    """Check if npm and node are on PATH.

    Skips tests if either executable is missing.
    """
    for tool in ("npm", "node"):
        if shutil.which(tool) is None:
            pytest.skip(f"{tool} not available on PATH")


@pytest.fixture
def work_dir(tmp_path):
    """Empty working directory for commands that write files."""
    return tmp_path
