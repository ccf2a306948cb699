"""Pytest configuration and fixtures for Tessera tests."""

import pytest

from tessera import DictSource, Environment

DOCUMENT_START = "<!DOCTYPE html><html><head></head><body>"
DOCUMENT_END = "</body></html>"


@pytest.fixture
def components():
    """A small component library shared by the composition tests."""
    return {
        "page": {
            "settings": {"imports": {"my-button": "button"}},
            "template": "<main><my-button>Click</my-button></main>",
        },
        "button": "<button><slot></slot></button>",
        "card": {
            "settings": {"data": {"tone": "plain"}},
            "template": (
                '<link rel="stylesheet" href="/card.css">'
                '<article :class="tone">'
                '<header><slot name="title">Untitled</slot></header>'
                "<div><slot></slot></div>"
                "</article>"
            ),
        },
        "deck": {
            "settings": {"imports": {"x-card": "card"}},
            "template": (
                '<section><x-card title="One">first</x-card><x-card title="Two">second</x-card></section>'
            ),
        },
    }


@pytest.fixture
def source(components):
    return DictSource(components)


@pytest.fixture
def env(source):
    """Environment over the shared component library."""
    return Environment(source)


def make_env(components: dict, **kwargs) -> Environment:
    """Build an Environment over an in-memory component mapping."""
    return Environment(DictSource(components), **kwargs)


def document(body: str) -> str:
    """Wrap ``body`` the way root renders wrap fragment templates."""
    return f"{DOCUMENT_START}{body}{DOCUMENT_END}"


def body_of(html: str) -> str:
    """Inner markup of the document's <body>."""
    return html.split("<body>", 1)[1].rsplit("</body>", 1)[0]


def head_of(html: str) -> str:
    """Inner markup of the document's <head>."""
    return html.split("<head>", 1)[1].split("</head>", 1)[0]


def assert_contains(html: str, *expected_parts: str) -> None:
    """Assert rendered output contains all expected parts."""
    for part in expected_parts:
        assert part in html, (
            f"Rendered output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {html!r}"
        )
