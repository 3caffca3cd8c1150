"""Tests for the FastAPI service mode."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from skelgen.service import create_app
from skelgen.skeleton import DEFAULT_INDENT
from skelgen.transform import DocumentTransformer, TransformOptions


class _RecordingFactory:
    def __init__(self) -> None:
        self.options: list[TransformOptions] = []

    def __call__(self, options: TransformOptions) -> DocumentTransformer:
        self.options.append(options)
        return DocumentTransformer(options)


@pytest.fixture
def factory() -> _RecordingFactory:
    return _RecordingFactory()


@pytest.fixture
def client(factory: _RecordingFactory) -> TestClient:
    return TestClient(create_app(factory))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_transform_endpoint_returns_skeleton_and_triggers(
    client: TestClient, factory: _RecordingFactory
) -> None:
    response = client.post(
        "/transform",
        json={
            "source": "using System;\n#if DEBUG\nusing Debug;\n#endif\n[EmptyPartial] partial class Empty { }",
            "markers": ["EmptyPartial"],
            "symbols": ["DEBUG"],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["text"] == "using System;\nusing Debug;\n\npartial class Empty\n{\n}"
    assert [trigger["name"] for trigger in data["triggers"]] == ["Empty"]
    assert factory.options[0].symbols == frozenset({"DEBUG"})


def test_transform_endpoint_maps_parse_errors(client: TestClient) -> None:
    response = client.post("/transform", json={"source": "#region Open\nusing System;"})
    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "UnterminatedDirectiveError"
    assert data["line"] == 1
    assert data["detail"] == "Unterminated #region directive"


def test_transform_endpoint_validates_indent(client: TestClient) -> None:
    response = client.post("/transform", json={"source": "", "indent": -1})
    assert response.status_code == 422


def test_transform_endpoint_defaults_to_standard_indent(
    client: TestClient, factory: _RecordingFactory
) -> None:
    response = client.post(
        "/transform",
        json={"source": "namespace N { [EmptyPartial] partial class A { } }", "markers": ["EmptyPartial"]},
    )
    assert response.status_code == 200
    assert factory.options[0].indent == DEFAULT_INDENT
    pad = " " * DEFAULT_INDENT
    assert response.json()["text"] == f"namespace N\n{{\n{pad}partial class A\n{pad}{{\n{pad}}}\n}}"
