"""Tests for Environment detection."""

import pytest

from src.core.environment import Environment


@pytest.mark.parametrize(
    "value,expected",
    [
        ("production", "production"),
        ("STAGING", "staging"),
        ("testing", "testing"),
        ("qa-cluster", "production"),
    ],
)
def test_current(monkeypatch, value, expected):
    monkeypatch.setenv("ENV", value)
    assert Environment.current() == expected


def test_current_defaults_to_production(monkeypatch):
    monkeypatch.delenv("ENV", raising=False)
    assert Environment.is_production()
    assert not Environment.is_development()


def test_testing_counts_as_development(monkeypatch):
    monkeypatch.setenv("ENV", "testing")
    assert Environment.is_development()
    assert not Environment.is_production()
