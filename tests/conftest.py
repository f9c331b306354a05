"""Shared pytest fixtures for the AppForge test suite.

Provides reusable fixtures for:
- Raw descriptor documents (minimal, full, per target)
- Validated ``ProjectDescriptor`` instances
- A deterministic ``GeneratorConfig`` (seeded identifiers, tmp archive dir)
- The template registry and project generator
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from appforge.config import GeneratorConfig, PackagingConfig
from appforge.models import ProjectDescriptor
from appforge.scaffolder.generator import ProjectGenerator
from appforge.scaffolder.templates import TemplateRegistry


# ---------------------------------------------------------------------------
# Descriptor documents
# ---------------------------------------------------------------------------

@pytest.fixture
def minimal_document() -> dict[str, Any]:
    """The smallest document that validates: a name and a target."""
    return {"name": "Acme", "target": "backend-express"}


@pytest.fixture
def acme_document() -> dict[str, Any]:
    """The order_item / unit_price scenario used throughout the suite."""
    return {
        "name": "Acme",
        "target": "backend-express",
        "databaseSchema": {
            "tables": [
                {"name": "order_item", "columns": [{"name": "unit_price", "type": "decimal"}]},
            ],
        },
    }


@pytest.fixture
def full_document() -> dict[str, Any]:
    """A descriptor exercising every optional section."""
    return {
        "name": "ShopApp",
        "platformIdentifier": "com.example.shopapp",
        "target": "android",
        "metadata": {"author": "Jane Doe", "description": "A small shop"},
        "databaseSchema": {
            "tables": [
                {
                    "name": "customer",
                    "columns": [
                        {"name": "id", "type": "integer"},
                        {"name": "full_name", "type": "string"},
                        {"name": "email", "type": "email"},
                        {"name": "created_at", "type": "datetime"},
                    ],
                },
                {
                    "name": "order_item",
                    "columns": [
                        {"name": "unit_price", "type": "decimal"},
                        {"name": "quantity", "type": "int"},
                        {"name": "notes", "type": "geometry"},
                    ],
                },
                {"name": "audit_marker", "columns": []},
            ],
        },
        "apiEndpoints": [
            {"path": "/customers", "method": "GET", "returnType": "Customer[]"},
            {
                "path": "/customers/{id}",
                "method": "GET",
                "parameters": [{"name": "id", "type": "integer"}],
                "returnType": "Customer",
            },
            {
                "path": "/orders",
                "method": "POST",
                "name": "create_order",
                "parameters": [
                    {"name": "customer_id", "type": "integer"},
                    {"name": "unit_price", "type": "decimal"},
                ],
                "returnType": "OrderItem",
            },
            {
                "path": "/orders/:orderId",
                "method": "DELETE",
                "returnType": "void",
            },
            {
                "path": "/search",
                "method": "GET",
                "parameters": [{"name": "q", "type": "string"}],
                "returnType": "string[]",
            },
        ],
        "uiComponents": [
            {"name": "home", "type": "screen"},
            {"name": "order_list", "type": "screen"},
            {"name": "profile", "type": "screen"},
        ],
    }


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

@pytest.fixture
def acme_descriptor(acme_document: dict[str, Any]) -> ProjectDescriptor:
    return ProjectDescriptor.from_document(acme_document)


@pytest.fixture
def full_descriptor(full_document: dict[str, Any]) -> ProjectDescriptor:
    return ProjectDescriptor.from_document(full_document)


@pytest.fixture
def ios_descriptor(full_document: dict[str, Any]) -> ProjectDescriptor:
    """The full document retargeted to iOS, without API endpoints."""
    document = dict(full_document, target="ios", platformIdentifier="com.example.ShopApp")
    document.pop("apiEndpoints")
    return ProjectDescriptor.from_document(document)


# ---------------------------------------------------------------------------
# Generator plumbing
# ---------------------------------------------------------------------------

@pytest.fixture
def config(tmp_path: Path) -> GeneratorConfig:
    """Deterministic configuration writing archives and scratch dirs under tmp_path."""
    return GeneratorConfig(
        identifier_seed=1234,
        packaging=PackagingConfig(
            scratch_root=tmp_path / "scratch",
            archive_dir=tmp_path / "archives",
        ),
    )


@pytest.fixture
def registry() -> TemplateRegistry:
    return TemplateRegistry()


@pytest.fixture
def generator(config: GeneratorConfig, registry: TemplateRegistry) -> ProjectGenerator:
    return ProjectGenerator(config, registry)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Output root for a single generation run (not created in advance)."""
    return tmp_path / "out"
