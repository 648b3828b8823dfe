"""Test fixtures package for forcelogout.

- identity: In-memory identity provider and user factories

Usage:
    from tests.fixtures.identity import InMemoryIdentityService, make_users
"""

from .identity import (
    InMemoryIdentityService,
    identity_service,
    make_users,
    quota_error,
    sample_users,
)

__all__ = [
    "InMemoryIdentityService",
    "identity_service",
    "make_users",
    "quota_error",
    "sample_users",
]
