"""
Root conftest.py for the livestock project.

This file helps pytest discover and configure tests across the shared
contracts package and the services.
"""

import sys
from pathlib import Path


def pytest_configure(config):
    """
    Configure pytest to add the contracts and service directories to sys.path.

    Each service keeps its code in a uniquely named package, so all of them
    can be on the path at once.
    """
    root_dir = Path(__file__).parent

    # Always add common directory
    sys.path.insert(0, str(root_dir / "common"))

    for service_path in sorted((root_dir / "services").iterdir()):
        if service_path.is_dir() and str(service_path) not in sys.path:
            sys.path.insert(0, str(service_path))
