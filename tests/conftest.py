"""
Shared pytest fixtures and configuration for lazyloader tests.

This module provides the in-memory data sources, the meter registry and the
mocked boto3 client used across the unit tests.
"""

from unittest.mock import MagicMock

import pytest

from lazyloader import ListDao, MeterManager

BATCH_SIZE = 5
ELEMENT_COUNT = 13


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")


@pytest.fixture
def int_dao():
    """ListDao over 1..13 with every call recorded."""
    return MagicMock(wraps=ListDao(range(1, ELEMENT_COUNT + 1)))


@pytest.fixture
def empty_dao():
    """ListDao with nothing in it, calls recorded."""
    return MagicMock(wraps=ListDao([]))


@pytest.fixture
def meter_manager():
    """A fresh MeterManager per test."""
    return MeterManager()


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    This fixture provides a mock client for unit tests that don't need
    real DynamoDB interactions.
    """
    client = MagicMock()
    client.get_paginator.return_value = MagicMock()
    return client
