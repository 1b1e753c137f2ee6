"""
Unit tests for the transaction configuration.

HOW TO RUN:
From the project root, run:
    pytest src/transactions/test_config.py
"""

import pytest
from pydantic import ValidationError

from .config import TransactionConfig


def test_defaults():
    config = TransactionConfig()

    assert config.resource_namespace == "urn:uuid:"
    assert config.validate_on_commit is True
    assert config.log_queries is False


def test_from_env(monkeypatch):
    """ONTOLOGY_TX_* variables override the defaults."""
    print("Testing configuration from environment...")

    monkeypatch.setenv("ONTOLOGY_TX_RESOURCE_NAMESPACE", "http://example.org/data/")
    monkeypatch.setenv("ONTOLOGY_TX_VALIDATE_ON_COMMIT", "false")
    monkeypatch.setenv("ONTOLOGY_TX_LOG_QUERIES", "1")

    config = TransactionConfig.from_env()

    assert config.resource_namespace == "http://example.org/data/"
    assert config.validate_on_commit is False
    assert config.log_queries is True

    print("✓ Configuration from environment working correctly")


def test_from_env_without_variables(monkeypatch):
    for name in ("RESOURCE_NAMESPACE", "VALIDATE_ON_COMMIT", "LOG_QUERIES"):
        monkeypatch.delenv(f"ONTOLOGY_TX_{name}", raising=False)

    assert TransactionConfig.from_env() == TransactionConfig()


def test_invalid_values(monkeypatch):
    monkeypatch.setenv("ONTOLOGY_TX_VALIDATE_ON_COMMIT", "sometimes")
    with pytest.raises(ValidationError):
        TransactionConfig.from_env()

    with pytest.raises(ValidationError):
        TransactionConfig(resource_namespace="")
