"""Tests for the Flask API routes."""

from __future__ import annotations

import pytest

from app import create_app
from serializer.options import SerializerOptions


HEADERS = {"X-API-Key": "test-api-key"}


# --- Fixtures ---


@pytest.fixture
def ast():
    return [
        {"type": "string", "name": "title", "value": "Hello"},
        {
            "type": "many",
            "name": "items",
            "children": [
                [{"type": "string", "name": "x", "value": "a"}],
                [{"type": "string", "name": "x", "value": "b"}],
            ],
        },
    ]


@pytest.fixture
def app(monkeypatch):
    """Create a test Flask app with a fixed API key and default options."""
    monkeypatch.setenv("SERIALIZER_API_KEY", "test-api-key")
    test_config = {
        "TESTING": True,
        "FIELD_TYPES_PATH": None,
        "SERIALIZER_OPTIONS": SerializerOptions(),
    }
    return create_app(test_config)


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


# --- Health ---


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "ok"
        assert data["service"] == "form-serializer"


# --- Field types ---


class TestFieldTypes:
    def test_lists_default_types(self, client):
        resp = client.get("/api/field-types")
        assert resp.status_code == 200
        data = resp.get_json()
        assert "string" in data["leaf"]
        assert data["attr"] == ["attr"]
        assert data["many"] == ["many"]
        assert "section" in data["pass_through"]

    def test_loads_field_types_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SERIALIZER_API_KEY", "test-api-key")
        path = tmp_path / "field_types.yaml"
        path.write_text("leaf_types: [slug]\n", encoding="utf-8")
        app = create_app({"TESTING": True, "FIELD_TYPES_PATH": str(path)})

        resp = app.test_client().get("/api/field-types")
        assert "slug" in resp.get_json()["leaf"]


# --- Auth ---


class TestAuth:
    def test_missing_key(self, client, ast):
        resp = client.post("/api/serialize", json={"ast": ast})
        assert resp.status_code == 401

    def test_wrong_key(self, client, ast):
        resp = client.post(
            "/api/serialize", json={"ast": ast}, headers={"X-API-Key": "nope"}
        )
        assert resp.status_code == 403

    def test_key_not_configured(self, client, ast, monkeypatch):
        monkeypatch.delenv("SERIALIZER_API_KEY")
        resp = client.post("/api/serialize", json={"ast": ast}, headers=HEADERS)
        assert resp.status_code == 500


# --- Serialize ---


class TestSerialize:
    def test_serialize_ast(self, client, ast):
        resp = client.post("/api/serialize", json={"ast": ast}, headers=HEADERS)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["count"] == 3
        assert data["fields"] == [
            ["title", "Hello"],
            ["items[0][x]", "a"],
            ["items[1][x]", "b"],
        ]

    def test_prefix_and_implicit_indexing(self, client, ast):
        resp = client.post(
            "/api/serialize",
            json={"ast": ast, "prefix": "form", "indexing": "implicit"},
            headers=HEADERS,
        )
        assert resp.get_json()["fields"] == [
            ["form[title]", "Hello"],
            ["form[items][][x]", "a"],
            ["form[items][][x]", "b"],
        ]

    def test_data_mode(self, client, ast):
        resp = client.post(
            "/api/serialize",
            json={
                "ast": ast,
                "mode": "data",
                "indexing": "implicit",
                "list_of_maps_placeholder": True,
            },
            headers=HEADERS,
        )
        assert resp.get_json()["fields"] == [
            ["title", "Hello"],
            ["items[][__rack_workaround]", ""],
            ["items[][x]", "a"],
            ["items[][__rack_workaround]", ""],
            ["items[][x]", "b"],
        ]

    def test_plain_data(self, client):
        resp = client.post(
            "/api/serialize",
            json={"data": {"field-one": 123, "field-two": "Title", "tags": []}},
            headers=HEADERS,
        )
        assert resp.status_code == 200
        assert resp.get_json()["fields"] == [
            ["field-one", 123],
            ["field-two", "Title"],
            ["tags", ""],
        ]

    def test_additional_field_types(self, client):
        body = {"ast": [{"type": "slug", "name": "slug", "value": "a-b"}]}
        resp = client.post("/api/serialize", json=body, headers=HEADERS)
        assert resp.status_code == 422

        body["additional_field_types"] = ["slug"]
        resp = client.post("/api/serialize", json=body, headers=HEADERS)
        assert resp.status_code == 200
        assert resp.get_json()["fields"] == [["slug", "a-b"]]

    def test_unknown_field_type(self, client):
        body = {
            "ast": [{"type": "attr", "name": "a", "children": [{"type": "bogus", "name": "x"}]}],
            "prefix": "form",
        }
        resp = client.post("/api/serialize", json=body, headers=HEADERS)
        assert resp.status_code == 422
        data = resp.get_json()
        assert data["tag"] == "bogus"
        assert data["path"] == ["form", "a"]

    def test_depth_limit(self, client):
        node = {"type": "string", "name": "x", "value": 1}
        for _ in range(5):
            node = {"type": "attr", "name": "a", "children": [node]}
        resp = client.post(
            "/api/serialize", json={"ast": [node], "max_depth": 2}, headers=HEADERS
        )
        assert resp.status_code == 422

    def test_deep_ast_uses_default_limit(self, client):
        node = {"type": "string", "name": "x", "value": 1}
        for _ in range(100):
            node = {"type": "section", "children": [node]}
        resp = client.post("/api/serialize", json={"ast": [node]}, headers=HEADERS)
        assert resp.status_code == 422
        assert "Maximum depth 64" in resp.get_json()["error"]

    def test_deep_plain_data(self, client):
        data = "x"
        for _ in range(200):
            data = [data]
        resp = client.post("/api/serialize", json={"data": {"a": data}}, headers=HEADERS)
        assert resp.status_code == 422
        assert resp.get_json()["path"][0] == "a"

    def test_malformed_node(self, client):
        resp = client.post(
            "/api/serialize", json={"ast": [{"name": "untyped"}]}, headers=HEADERS
        )
        assert resp.status_code == 400
        assert "type" in resp.get_json()["error"]


class TestSerializeValidation:
    def test_no_body(self, client):
        resp = client.post("/api/serialize", data="nope", headers=HEADERS)
        assert resp.status_code == 400

    def test_missing_ast_and_data(self, client):
        resp = client.post("/api/serialize", json={"prefix": "x"}, headers=HEADERS)
        assert resp.status_code == 400
        assert "'ast' or 'data'" in resp.get_json()["error"]

    def test_both_ast_and_data(self, client, ast):
        resp = client.post(
            "/api/serialize", json={"ast": ast, "data": {}}, headers=HEADERS
        )
        assert resp.status_code == 400

    def test_data_must_be_object(self, client):
        resp = client.post("/api/serialize", json={"data": [1]}, headers=HEADERS)
        assert resp.status_code == 400

    def test_bad_mode(self, client, ast):
        resp = client.post(
            "/api/serialize", json={"ast": ast, "mode": "xml"}, headers=HEADERS
        )
        assert resp.status_code == 400

    def test_bad_options(self, client, ast):
        resp = client.post(
            "/api/serialize", json={"ast": ast, "indexing": "sparse"}, headers=HEADERS
        )
        assert resp.status_code == 400
        assert "Invalid options" in resp.get_json()["error"]


# --- HTML ---


class TestSerializeHtml:
    def test_renders_hidden_inputs(self, client, ast):
        resp = client.post("/api/serialize/html", json={"ast": ast}, headers=HEADERS)
        assert resp.status_code == 200
        assert resp.mimetype == "text/html"
        body = resp.get_data(as_text=True)
        assert body.count('type="hidden"') == 3
        assert '<input type="hidden" name="items[1][x]" value="b">' in body

    def test_errors_stay_json(self, client):
        resp = client.post(
            "/api/serialize/html",
            json={"ast": [{"type": "bogus", "name": "x"}]},
            headers=HEADERS,
        )
        assert resp.status_code == 422
        assert resp.get_json()["tag"] == "bogus"
