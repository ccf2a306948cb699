"""Shared pytest configuration for tessera examples.

Provides:

- ``example_app``: loads and executes the ``app.py`` next to the test in an
  isolated module namespace, so every test starts with fresh caches
- ``memory_env``: builds an Environment over an in-memory component mapping,
  for tests that try a variation of an example's components
- ``body_of``: extracts the inner markup of a rendered document's ``<body>``
"""

import importlib.util
from pathlib import Path

import pytest

from tessera import DictSource, Environment


@pytest.fixture
def example_app(request: pytest.FixtureRequest):
    """Load a fresh module from the sibling app.py next to the test file."""
    app_path = Path(request.path).parent / "app.py"
    module_name = f"tessera_example_{app_path.parent.name}"
    spec = importlib.util.spec_from_file_location(module_name, app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def memory_env():
    """Factory: ``memory_env(components, **environment_options)``."""

    def build(components: dict, **kwargs) -> Environment:
        return Environment(DictSource(components), **kwargs)

    return build


@pytest.fixture
def body_of():
    """Helper returning the markup between ``<body>`` and ``</body>``."""

    def extract(html: str) -> str:
        return html.split("<body>", 1)[1].rsplit("</body>", 1)[0]

    return extract
