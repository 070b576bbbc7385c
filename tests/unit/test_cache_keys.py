"""Tests for cache key builders and pattern helpers."""

import re

import pytest

from gatekeeper.infrastructure.cache.keys import (
    config_key,
    literal_prefix,
    maintenance_key,
    permission_key,
    roles_key,
    tenant_pattern,
)


def test_key_format() -> None:
    assert config_key("123", "ban") == "permissions:config:123:ban"
    assert roles_key("123", "456") == "permissions:roles:123:456"
    assert maintenance_key("123") == "permissions:maintenance:123"
    assert permission_key("config", "123") == "permissions:config:123"


def test_components_must_not_contain_separator() -> None:
    with pytest.raises(ValueError, match="separator"):
        config_key("1:2", "ban")
    with pytest.raises(ValueError, match="empty"):
        config_key("", "ban")


def test_tenant_pattern_matches_only_that_tenant() -> None:
    regex = re.compile(tenant_pattern("12"))
    assert regex.fullmatch("permissions:config:12:ban")
    assert regex.fullmatch("permissions:maintenance:12")
    assert regex.fullmatch("permissions:roles:12:99")
    assert not regex.fullmatch("permissions:config:123:ban")
    assert not regex.fullmatch("permissions:config:112:ban")


def test_tenant_pattern_for_one_kind() -> None:
    regex = re.compile(tenant_pattern("12", "roles"))
    assert regex.fullmatch("permissions:roles:12:99")
    assert not regex.fullmatch("permissions:config:12:ban")


def test_literal_prefix() -> None:
    assert literal_prefix(tenant_pattern("12", "roles")) == "permissions:roles:12"
    assert literal_prefix(tenant_pattern("12")) == "permissions:"
    assert literal_prefix("abc.*") == "abc"
    assert literal_prefix("abcd*") == "abc"
    assert literal_prefix(".*") == ""
