"""Test utilities for swaggerui handlers::

    from swaggerui.testing import TestClient
"""

from swaggerui.testing.client import TestClient

__all__ = ["TestClient"]
