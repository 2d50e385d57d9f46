"""Dependency Injection Container Module.

This module provides the DI container and factory for wiring the live data
pipeline.

Usage:
------
    # Build at startup and hand the container (or its parts) to the app
    from poslive.core.config import settings
    from poslive.core.container import create_container

    container = create_container(settings, typed_sink=store)
    container.live_data.set_tenant("restaurant-42")

    # In tests (construct directly with fakes)
    from poslive.core.container import Container
    test_container = Container(...)

There is no process-wide container instance: every app or test session
builds its own.

Module structure:
-----------------
    container/
    ├── __init__.py      # This file - exports public API
    ├── container.py     # Container dataclass (serves)
    └── factory.py       # create_container() (builds)
"""

from poslive.core.container.container import Container
from poslive.core.container.factory import create_container

__all__ = ["Container", "create_container"]
