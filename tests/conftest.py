import textwrap
from pathlib import Path

import pytest

from tests.helpers import FakeClock, write


@pytest.fixture(autouse=True)
def _clean_breeze_env(monkeypatch):
    """Keeps BREEZE_* variables of the developer's shell out of the tests."""
    for name in (
        "BREEZE_CACHE",
        "BREEZE_CACHE_DIR",
        "BREEZE_CACHE_MAX_ITEMS",
        "BREEZE_CACHE_TTL",
        "BREEZE_VIEWS_PATH",
        "BREEZE_ALLOW_NATIVE",
        "BREEZE_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def views(tmp_path: Path):
    """Views directory with a layout of typical templates."""
    root = tmp_path / "resources" / "views"
    write(root / "home.breeze", "Hello {{ name }}!")
    write(root / "about.html", "About {{ company | upper }}")
    write(root / "both.page", "page wins")
    write(root / "both.html", "html loses")
    write(root / "list.breeze", textwrap.dedent("""\
        @foreach(items as item)
        - {{ item.title | trim }}@if(item.done) (done)@endif
        @endforeach"""))
    return root
