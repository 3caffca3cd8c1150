from __future__ import annotations

import textwrap
from typing import Callable

import pytest

from skelgen.transform import DocumentTransformer, TransformOptions

MARKER = "EmptyPartial"


def _normalise(text: str) -> str:
    return textwrap.dedent(text).strip("\n")


@pytest.fixture
def transformer() -> DocumentTransformer:
    """Transformer recognizing the EmptyPartial marker with no symbols defined."""
    return DocumentTransformer(TransformOptions.create(markers=[MARKER]))


@pytest.fixture
def generate(transformer: DocumentTransformer) -> Callable[[str], str]:
    """Return a helper that dedents a source snippet and transforms it."""

    def _generate(source: str) -> str:
        return transformer.transform(_normalise(source)).text

    return _generate


@pytest.fixture
def expected() -> Callable[[str], str]:
    """Return a helper that dedents an expected output snippet."""
    return _normalise
