"""
Pytest configuration for contract_guard tests.

Provides:
- Contract fixtures loaded from tests/fixtures
- build_contract helper for small in-code contracts
- Registry isolation between tests
"""

from pathlib import Path

import pytest

from contract_guard.contracts.loader import contract_from_document, load_contract
from contract_guard.contracts.registry import CONTRACTS


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def petstore_path():
    """Return path to the petstore contract document."""
    return FIXTURES_DIR / "petstore.yaml"


@pytest.fixture
def petstore(petstore_path):
    """Petstore contract loaded from YAML (positions recorded)."""
    return load_contract(petstore_path)


@pytest.fixture
def build_contract():
    """
    Build a contract from a paths mapping.

    Usage:
        contract = build_contract({
            "/items/{id}": {"get": {"parameters": [path_param("id", "integer")]}},
        })
    """
    def _build(paths, name="test", components=None):
        document = {
            "openapi": "3.0.3",
            "info": {"title": name, "version": "1.0.0"},
            "paths": paths,
        }
        if components:
            document["components"] = components
        return contract_from_document(document, name=name)
    return _build


@pytest.fixture(autouse=True)
def isolated_registry():
    """Restore the global contract registry after each test."""
    saved = dict(CONTRACTS)
    yield
    CONTRACTS.clear()
    CONTRACTS.update(saved)


def path_param(name, type_=None):
    """Path parameter object as written in a document."""
    param = {"name": name, "in": "path", "required": True}
    if type_ is not None:
        param["schema"] = {"type": type_}
    return param
