"""Tests for Settings validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from community_access.config.settings import Settings


def test_role_cache_ttl_defaults_to_disabled():
    settings = Settings(_env_file=None)
    assert settings.role_cache_ttl_sec == 0.0
    assert settings.role_cache_enabled is False


def test_role_cache_ttl_within_cap():
    settings = Settings(_env_file=None, role_cache_ttl_sec=300)
    assert settings.role_cache_enabled is True


@pytest.mark.parametrize("ttl", [301, 3600, -1])
def test_role_cache_ttl_out_of_range_rejected(ttl):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, role_cache_ttl_sec=ttl)


def test_cors_origins_list():
    settings = Settings(_env_file=None, cors_origins="http://a.test, ,http://b.test")
    assert settings.get_cors_origins_list() == ["http://a.test", "http://b.test"]
