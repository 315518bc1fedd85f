"""
Path resolution tests.

Covers:
1. Literal (byte-identical) matches
2. Placeholder matches with type-conforming values
3. Type-mismatched placeholders falling through to "path not found"
4. Segment-count short circuit
5. Declared-order tie-breaking (/pets/mine vs /pets/{petId})
6. Method lookup (only declared methods, only the eight HTTP tokens)
7. Optional parameter type error reporting
"""

import pytest

from conftest import path_param
from contract_guard.contracts.paths import (
    check_parameter_type,
    compare_paths,
    find_path,
    find_path_parameter,
)
from contract_guard.contracts.registry import ParameterSpec, SchemaDefinition


def _ok(description="ok"):
    return {"responses": {"200": {"description": description}}}


def _spec(name, *types, location="path"):
    return ParameterSpec(name=name, location=location, schema=SchemaDefinition(schema={}, types=types))


# =============================================================================
# LITERAL MATCHES
# =============================================================================

class TestLiteralMatch:

    def test_identical_path_matches_with_no_errors(self, petstore):
        item, errors, template = find_path("GET", "/pets", petstore)

        assert item is not None
        assert errors == []
        assert template == "/pets"
        assert item.template == "/pets"

    def test_literal_template_with_braces_matches_itself(self, build_contract):
        contract = build_contract({"/items/{id}": {"get": {"parameters": [path_param("id", "integer")]}}})

        item, errors, template = find_path("GET", "/items/{id}", contract)

        assert item is not None
        assert errors == []
        assert template == "/items/{id}"

    def test_every_declared_template_resolves_to_itself(self, petstore):
        for item in petstore.paths:
            for method in item.methods:
                found, errors, template = find_path(method, item.template, petstore)
                assert found is item
                assert errors == []
                assert template == item.template


# =============================================================================
# PLACEHOLDER MATCHES
# =============================================================================

class TestPlaceholderMatch:

    def test_integer_parameter_accepts_number(self, petstore):
        item, errors, template = find_path("GET", "/pets/42", petstore)

        assert item is not None
        assert errors == []
        assert template == "/pets/{petId}"

    def test_integer_parameter_accepts_decimal(self, petstore):
        # only float-parseability is checked, not integrality
        item, _, template = find_path("GET", "/pets/4.5", petstore)
        assert template == "/pets/{petId}"

    def test_integer_parameter_rejects_text(self, build_contract):
        contract = build_contract({"/items/{id}": {"get": {"parameters": [path_param("id", "integer")]}}})

        assert find_path("GET", "/items/42", contract)[2] == "/items/{id}"
        item, errors, template = find_path("GET", "/items/abc", contract)

        assert item is None
        assert template == ""
        assert len(errors) == 1
        assert errors[0].is_path_missing

    def test_number_parameter_rejects_text(self, petstore):
        item, errors, _ = find_path("GET", "/users/bob/orders/first", petstore)

        assert item is None
        assert errors[0].is_path_missing

    def test_multiple_placeholders(self, petstore):
        item, errors, template = find_path("GET", "/users/bob/orders/7", petstore)

        assert item is not None
        assert errors == []
        assert template == "/users/{userId}/orders/{orderNo}"

    def test_string_parameter_rejects_numeric_value(self, petstore):
        # orderId is declared string (through a $ref), 123 parses as a number
        item, errors, template = find_path("POST", "/orders/123", petstore)

        assert item is None
        assert template == ""
        assert len(errors) == 1
        assert errors[0].is_path_missing

    def test_string_parameter_accepts_text(self, petstore):
        item, errors, template = find_path("POST", "/orders/abc-123", petstore)

        assert item is not None
        assert errors == []
        assert template == "/orders/{orderId}"

    def test_untyped_parameter_accepts_anything(self, build_contract):
        contract = build_contract({"/files/{name}": {"get": {"parameters": [path_param("name")]}}})

        assert find_path("GET", "/files/42", contract)[2] == "/files/{name}"
        assert find_path("GET", "/files/readme", contract)[2] == "/files/{name}"

    def test_undeclared_placeholder_accepts_anything(self, build_contract):
        contract = build_contract({"/files/{name}": {"get": _ok()}})

        assert find_path("GET", "/files/1.5", contract)[2] == "/files/{name}"

    def test_literal_segments_must_agree(self, build_contract):
        contract = build_contract({"/users/{id}/orders": {"get": {"parameters": [path_param("id", "integer")]}}})

        assert find_path("GET", "/users/42/orders", contract)[2] == "/users/{id}/orders"
        item, errors, _ = find_path("GET", "/users/42/invoices", contract)
        assert item is None
        assert errors[0].is_path_missing

    def test_operation_parameter_overrides_path_level(self, build_contract):
        contract = build_contract({
            "/things/{id}": {
                "parameters": [path_param("id", "integer")],
                "get": {"parameters": [path_param("id", "string")], **_ok()},
                "delete": _ok(),
            },
        })

        # GET sees the operation-level string declaration
        assert find_path("GET", "/things/abc", contract)[2] == "/things/{id}"
        assert find_path("GET", "/things/42", contract)[0] is None
        # DELETE inherits the path-level integer declaration
        assert find_path("DELETE", "/things/42", contract)[2] == "/things/{id}"
        assert find_path("DELETE", "/things/abc", contract)[0] is None


# =============================================================================
# PATH NOT FOUND
# =============================================================================

class TestPathNotFound:

    def test_unknown_path_returns_single_missing_error(self, petstore):
        item, errors, template = find_path("GET", "/dogs/1", petstore)

        assert item is None
        assert template == ""
        assert len(errors) == 1
        error = errors[0]
        assert error.validation_type == "path"
        assert error.validation_sub_type == "missing"
        assert "/dogs/1" in error.message
        assert error.message == "Path '/dogs/1' not found"
        assert "/dogs/1" in error.reason
        assert error.spec_line == -1
        assert error.spec_col == -1
        assert error.how_to_fix

    def test_segment_count_mismatch_never_matches(self, build_contract):
        contract = build_contract({
            "/a/b/c": {"get": _ok()},
            "/a": {"get": _ok()},
        })

        item, errors, _ = find_path("GET", "/a/b", contract)

        assert item is None
        assert len(errors) == 1

    def test_trailing_slash_changes_segment_count(self, petstore):
        item, _, _ = find_path("GET", "/pets/", petstore)
        assert item is None

    def test_empty_contract(self, build_contract):
        item, errors, template = find_path("GET", "/anything", build_contract({}))

        assert item is None
        assert template == ""
        assert errors[0].is_path_missing


# =============================================================================
# SEGMENT COUNT SHORT CIRCUIT
# =============================================================================

class TestComparePaths:

    def test_length_mismatch_ignores_parameters(self):
        # a parameter that would fail its type check is never consulted
        params = (_spec("x", "integer"),)
        assert compare_paths(["a", "{x}", "c"], ["a", "nope"], params, "/a/nope") == (False, [])
        assert compare_paths(["a"], ["a", "b"], params, "/a/b") == (False, [])

    def test_type_failure_returns_error(self):
        params = (_spec("x", "integer"),)
        matched, errors = compare_paths(["a", "{x}"], ["a", "nope"], params, "/a/nope")

        assert matched is False
        assert len(errors) == 1
        assert errors[0].validation_sub_type == "number"
        assert "'x'" in errors[0].message

    def test_literal_mismatch_has_no_errors(self):
        assert compare_paths(["a", "b"], ["a", "c"], (), "/a/c") == (False, [])

    def test_match(self):
        params = (_spec("x", "integer"),)
        assert compare_paths(["a", "{x}"], ["a", "7"], params, "/a/7") == (True, [])


# =============================================================================
# TIE-BREAKING BY DECLARED ORDER
# =============================================================================

class TestDeclaredOrder:

    def test_literal_declared_first_wins(self, build_contract):
        contract = build_contract({
            "/pets/mine": {"get": _ok()},
            "/pets/{petId}": {"get": {"parameters": [path_param("petId", "integer")], **_ok()}},
        })

        assert find_path("GET", "/pets/mine", contract)[2] == "/pets/mine"
        assert find_path("GET", "/pets/7", contract)[2] == "/pets/{petId}"

    def test_typed_placeholder_first_rejects_literal_text(self, build_contract):
        # 'mine' is not a number, so the integer placeholder falls through
        contract = build_contract({
            "/pets/{petId}": {"get": {"parameters": [path_param("petId", "integer")], **_ok()}},
            "/pets/mine": {"get": _ok()},
        })

        assert find_path("GET", "/pets/mine", contract)[2] == "/pets/mine"

    def test_string_placeholder_first_wins_over_literal(self, build_contract):
        # No specificity scoring: first visited template that matches wins
        contract = build_contract({
            "/pets/{petId}": {"get": {"parameters": [path_param("petId", "string")], **_ok()}},
            "/pets/mine": {"get": _ok()},
        })

        item, errors, template = find_path("GET", "/pets/mine", contract)

        assert template == "/pets/{petId}"
        assert errors == []
        assert item is contract.paths[0]

    def test_fixture_order_resolves_literal(self, petstore):
        assert find_path("GET", "/pets/mine", petstore)[2] == "/pets/mine"


# =============================================================================
# METHOD LOOKUP
# =============================================================================

class TestMethodLookup:

    def test_template_without_method_is_skipped(self, petstore):
        # /pets/mine only declares GET
        item, errors, _ = find_path("DELETE", "/pets/mine", petstore)

        assert item is None
        assert errors[0].is_path_missing

    def test_method_picks_template_declaring_it(self, build_contract):
        contract = build_contract({
            "/jobs/{id}": {"get": _ok()},
            "/jobs/{key}": {"put": _ok()},
        })

        assert find_path("GET", "/jobs/1", contract)[2] == "/jobs/{id}"
        assert find_path("PUT", "/jobs/1", contract)[2] == "/jobs/{key}"

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD", "PATCH", "TRACE"])
    def test_all_http_methods(self, build_contract, method):
        contract = build_contract({"/r": {method.lower(): _ok()}})

        item, errors, template = find_path(method, "/r", contract)

        assert template == "/r"
        assert item.get_operation(method).method == method

    def test_unknown_method_never_matches(self, build_contract):
        contract = build_contract({"/r": {"get": _ok()}})

        assert find_path("CONNECT", "/r", contract)[0] is None
        assert find_path("get", "/r", contract)[0] is None


# =============================================================================
# PARAMETER TYPE ERROR REPORTING
# =============================================================================

class TestParameterTypeReporting:

    def test_disabled_by_default(self, petstore, monkeypatch):
        monkeypatch.delenv("CONTRACT_REPORT_PARAM_TYPES", raising=False)

        _, errors, _ = find_path("GET", "/pets/abc", petstore)

        assert len(errors) == 1

    def test_reported_when_requested(self, petstore):
        item, errors, template = find_path("GET", "/pets/abc", petstore, report_parameter_types=True)

        assert item is None
        assert template == ""
        assert len(errors) == 2
        assert errors[0].is_path_missing
        type_error = errors[1]
        assert type_error.validation_type == "path"
        assert type_error.validation_sub_type == "number"
        assert "petId" in type_error.message
        assert "'abc'" in type_error.reason
        # located at the `type` key of the petId schema
        assert (type_error.spec_line, type_error.spec_col) == (41, 11)

    def test_string_mismatch_located_through_ref(self, petstore):
        _, errors, _ = find_path("POST", "/orders/123", petstore, report_parameter_types=True)

        assert [e.validation_sub_type for e in errors] == ["missing", "string"]
        assert (errors[1].spec_line, errors[1].spec_col) == (88, 9)

    def test_flag_enables_reporting(self, petstore, monkeypatch):
        monkeypatch.setenv("CONTRACT_REPORT_PARAM_TYPES", "true")

        _, errors, _ = find_path("GET", "/pets/abc", petstore)

        assert len(errors) == 2

    def test_explicit_argument_beats_flag(self, petstore, monkeypatch):
        monkeypatch.setenv("CONTRACT_REPORT_PARAM_TYPES", "true")

        _, errors, _ = find_path("GET", "/pets/abc", petstore, report_parameter_types=False)

        assert len(errors) == 1

    def test_not_reported_when_another_template_matches(self, build_contract):
        contract = build_contract({
            "/pets/{petId}": {"get": {"parameters": [path_param("petId", "integer")], **_ok()}},
            "/pets/{name}": {"get": {"parameters": [path_param("name", "string")], **_ok()}},
        })

        item, errors, template = find_path("GET", "/pets/rex", contract, report_parameter_types=True)

        assert template == "/pets/{name}"
        assert errors == []


# =============================================================================
# PARAMETER TYPE CHECK
# =============================================================================

class TestCheckParameterType:

    @pytest.mark.parametrize("value", ["42", "-1", "3.14", "1e3", "0"])
    def test_numbers_fit_numeric_types(self, value):
        assert check_parameter_type(_spec("n", "integer"), value) is None
        assert check_parameter_type(_spec("n", "number"), value) is None
        assert check_parameter_type(_spec("n", "string"), value) == "string"

    @pytest.mark.parametrize("value", ["abc", "", "12abc", " 1", "1_000"])
    def test_text_fits_string_only(self, value):
        assert check_parameter_type(_spec("n", "string"), value) is None
        assert check_parameter_type(_spec("n", "integer"), value) == "number"

    def test_every_declared_type_is_checked(self):
        spec = _spec("n", "string", "integer")
        assert check_parameter_type(spec, "42") == "string"
        assert check_parameter_type(spec, "abc") == "number"

    def test_conflicting_types_never_match(self, build_contract):
        contract = build_contract({
            "/u/{v}": {"get": {"parameters": [path_param("v", ["string", "integer"])]}},
        })

        assert find_path("GET", "/u/42", contract)[0] is None
        assert find_path("GET", "/u/abc", contract)[0] is None

    def test_nullable_union_keeps_primitive_check(self):
        spec = _spec("n", "integer", "null")
        assert check_parameter_type(spec, "abc") == "number"

    def test_unchecked_types_pass(self):
        assert check_parameter_type(_spec("n", "boolean"), "abc") is None
        assert check_parameter_type(_spec("n"), "abc") is None

    def test_find_path_parameter_ignores_other_locations(self):
        params = (_spec("id", "integer", location="query"), _spec("id", "string"))

        found = find_path_parameter(params, "id")

        assert found.location == "path"
        assert found.types == ("string",)


# =============================================================================
# PURITY
# =============================================================================

class TestIdempotence:

    @pytest.mark.parametrize("method,path", [
        ("GET", "/pets/42"),
        ("GET", "/pets/mine"),
        ("POST", "/orders/123"),
        ("GET", "/nowhere"),
    ])
    def test_repeat_resolution_is_identical(self, petstore, method, path):
        first = find_path(method, path, petstore, report_parameter_types=True)
        second = find_path(method, path, petstore, report_parameter_types=True)

        assert first[0] is second[0]
        assert first[1] == second[1]
        assert first[2] == second[2]
