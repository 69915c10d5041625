"""Pytest configuration and shared fixtures for Python tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from sdrs.config import TransferConfig
from sdrs.executor import RuleExecutor
from sdrs.transfer import InMemoryTransferClient

FIXED_NOW = datetime(2024, 3, 15, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


@pytest.fixture
def transfer_config() -> TransferConfig:
    """Transfer settings with the stock defaults."""
    return TransferConfig()


@pytest.fixture
def client() -> InMemoryTransferClient:
    """Fresh in-memory transfer service."""
    return InMemoryTransferClient()


@pytest.fixture
def executor(client: InMemoryTransferClient, transfer_config: TransferConfig) -> RuleExecutor:
    """Executor pinned to FIXED_NOW."""
    return RuleExecutor(client, transfer_config, clock=lambda: FIXED_NOW)
