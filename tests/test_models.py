"""Unit tests for appforge.models.

Covers:
- resolve_target for concrete, umbrella and unknown targets
- ProjectDescriptor.from_document: aliases, defaults, identifier collisions
- ApiEndpoint derived names and parameter locations
- GeneratedFile size accounting
"""

from __future__ import annotations

from typing import Any

import pytest

from appforge.errors import UnsupportedTargetError, ValidationError
from appforge.models import (
    ApiEndpoint,
    GeneratedFile,
    HTTPMethod,
    Parameter,
    ProjectDescriptor,
    Target,
    resolve_target,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# resolve_target
# ---------------------------------------------------------------------------

class TestResolveTarget:
    @pytest.mark.parametrize("value, expected", [
        ("android", Target.ANDROID),
        ("IOS", Target.IOS),
        (" react-native ", Target.REACT_NATIVE),
        ("backend-fastapi", Target.BACKEND_FASTAPI),
        (Target.FLUTTER, Target.FLUTTER),
    ])
    def test_concrete(self, value: Any, expected: Target) -> None:
        assert resolve_target(value) == expected

    def test_umbrella_defaults(self) -> None:
        assert resolve_target("cross-platform") == Target.REACT_NATIVE
        assert resolve_target("api") == Target.BACKEND_EXPRESS

    def test_umbrella_with_framework(self) -> None:
        assert resolve_target("cross-platform", "Flutter") == Target.FLUTTER
        assert resolve_target("api", "fastapi") == Target.BACKEND_FASTAPI

    def test_unknown_target(self) -> None:
        with pytest.raises(UnsupportedTargetError) as exc_info:
            resolve_target("windows-phone")
        assert exc_info.value.target == "windows-phone"
        assert "android" in exc_info.value.supported

    def test_unknown_framework(self) -> None:
        with pytest.raises(UnsupportedTargetError, match="api/django"):
            resolve_target("api", "django")


# ---------------------------------------------------------------------------
# ProjectDescriptor
# ---------------------------------------------------------------------------

class TestProjectDescriptor:
    def test_minimal(self, minimal_document: dict[str, Any]) -> None:
        descriptor = ProjectDescriptor.from_document(minimal_document)
        assert descriptor.name == "Acme"
        assert descriptor.tables == []
        assert descriptor.endpoints == []
        assert descriptor.has_schema is False
        assert descriptor.has_endpoints is False

    def test_aliases(self) -> None:
        descriptor = ProjectDescriptor.from_document({
            "projectName": "  Shop  ",
            "packageName": "com.example.shop",
            "userRequirements": {"description": "Shop app"},
            "database_schema": {"tables": []},
        })
        assert descriptor.name == "Shop"
        assert descriptor.platform_identifier == "com.example.shop"
        assert descriptor.metadata.description == "Shop app"
        assert descriptor.has_schema is True

    def test_extra_keys_ignored(self, minimal_document: dict[str, Any]) -> None:
        descriptor = ProjectDescriptor.from_document(dict(minimal_document, theme="dark"))
        assert not hasattr(descriptor, "theme")

    def test_frozen(self, acme_descriptor: ProjectDescriptor) -> None:
        with pytest.raises(Exception):
            acme_descriptor.name = "Other"  # type: ignore[misc]

    def test_missing_name(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ProjectDescriptor.from_document({"target": "ios"})
        assert exc_info.value.errors
        assert any(e.startswith("name") for e in exc_info.value.errors)

    def test_blank_name(self) -> None:
        with pytest.raises(ValidationError, match="name must be non-empty"):
            ProjectDescriptor.from_document({"name": "   "})

    def test_colliding_tables(self) -> None:
        document = {
            "name": "Acme",
            "databaseSchema": {"tables": [{"name": "order_item"}, {"name": "OrderItem"}]},
        }
        with pytest.raises(ValidationError, match="collide"):
            ProjectDescriptor.from_document(document)

    def test_colliding_columns(self) -> None:
        document = {
            "name": "Acme",
            "databaseSchema": {"tables": [{
                "name": "item",
                "columns": [{"name": "unit_price"}, {"name": "unitPrice"}],
            }]},
        }
        with pytest.raises(ValidationError, match="unitPrice"):
            ProjectDescriptor.from_document(document)

    def test_column_not_an_identifier(self) -> None:
        document = {
            "name": "Acme",
            "databaseSchema": {"tables": [{"name": "item", "columns": [{"name": "2fa"}]}]},
        }
        with pytest.raises(ValidationError, match="valid identifier"):
            ProjectDescriptor.from_document(document)

    def test_duplicate_operation_names(self) -> None:
        document = {
            "name": "Acme",
            "apiEndpoints": [
                {"path": "/users", "method": "get"},
                {"path": "/users/", "method": "GET"},
            ],
        }
        with pytest.raises(ValidationError, match="getUsers"):
            ProjectDescriptor.from_document(document)

    def test_colliding_ui_components(self) -> None:
        document = {"name": "Acme", "uiComponents": [{"name": "order_list"}, {"name": "OrderList"}]}
        with pytest.raises(ValidationError, match="ui components"):
            ProjectDescriptor.from_document(document)

    def test_ui_component_not_an_identifier(self) -> None:
        document = {"name": "Acme", "uiComponents": [{"name": "9lives"}]}
        with pytest.raises(ValidationError, match="valid identifier"):
            ProjectDescriptor.from_document(document)

    def test_free_text_name_has_identifier_code_name(self) -> None:
        descriptor = ProjectDescriptor.from_document({"name": 'Acme "Pro" \\ Ed'})
        assert descriptor.name == 'Acme "Pro" \\ Ed'
        assert descriptor.code_name == "AcmeProEd"
        assert descriptor.package_identifier == "com.example.acmeproed"

    @pytest.mark.parametrize("name, message", [
        ("Acme/Tools", "must not contain '/'"),
        ("1st App", "valid identifier"),
        ("!!!", "valid identifier"),
    ])
    def test_unusable_names(self, name: str, message: str) -> None:
        with pytest.raises(ValidationError, match=message):
            ProjectDescriptor.from_document({"name": name})

    def test_column_type_defaults_to_string(self) -> None:
        descriptor = ProjectDescriptor.from_document({
            "name": "Acme",
            "databaseSchema": {"tables": [{"name": "item", "columns": [{"name": "label"}]}]},
        })
        assert descriptor.tables[0].columns[0].type == "string"
        assert descriptor.tables[0].entity_name == "Item"

    def test_package_identifier_fallback(self, acme_descriptor: ProjectDescriptor) -> None:
        assert acme_descriptor.package_identifier == "com.example.acme"

    def test_resolved_target(self, full_descriptor: ProjectDescriptor) -> None:
        assert full_descriptor.resolved_target() == Target.ANDROID


# ---------------------------------------------------------------------------
# ApiEndpoint
# ---------------------------------------------------------------------------

class TestApiEndpoint:
    @pytest.mark.parametrize("method, path, expected", [
        ("GET", "/users", "getUsers"),
        ("GET", "/users/{id}", "getUsersById"),
        ("DELETE", "/orders/:orderId", "deleteOrdersByOrderId"),
        ("POST", "/order_items", "postOrderItems"),
    ])
    def test_derived_operation_name(self, method: str, path: str, expected: str) -> None:
        assert ApiEndpoint(path=path, method=method).operation_name == expected

    def test_explicit_name(self) -> None:
        endpoint = ApiEndpoint(path="/orders", method="POST", name="create_order")
        assert endpoint.operation_name == "createOrder"

    def test_method_is_upper_cased(self) -> None:
        assert ApiEndpoint(path="/x", method="patch").method == HTTPMethod.PATCH

    def test_return_type_alias(self) -> None:
        endpoint = ApiEndpoint.model_validate({"path": "/x", "returnType": "User[]"})
        assert endpoint.return_type == "User[]"

    def test_parameter_locations(self) -> None:
        endpoint = ApiEndpoint(
            path="/users/{id}",
            method="PUT",
            parameters=[Parameter(name="id"), Parameter(name="email")],
        )
        assert endpoint.path_parameters == ["id"]
        assert [endpoint.parameter_location(p) for p in endpoint.parameters] == ["path", "body"]
        assert endpoint.has_body is True

    def test_get_parameters_are_query(self) -> None:
        endpoint = ApiEndpoint(path="/search", parameters=[Parameter(name="q")])
        assert endpoint.parameter_location(endpoint.parameters[0]) == "query"
        assert endpoint.has_body is False

    def test_path_rewrites(self) -> None:
        braces = ApiEndpoint(path="/users/{id}")
        colon = ApiEndpoint(path="/users/:id")
        assert braces.express_path == "/users/:id"
        assert colon.template_path == "/users/{id}"


# ---------------------------------------------------------------------------
# GeneratedFile
# ---------------------------------------------------------------------------

class TestGeneratedFile:
    def test_size_counts_utf8_bytes(self) -> None:
        assert GeneratedFile(path="a.txt", content="héllo").size == 6

    def test_defaults_to_templated(self) -> None:
        assert GeneratedFile(path="a", content="").templated is True
