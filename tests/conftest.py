"""
Shared fixtures: a small content tree and a Flask test client bound to it.
"""
import re
from pathlib import Path

import pytest

import markdownWranglerApp
from config import app, configure

SECRET = b"test-secret-key-for-csrf-testing!"

_CSRF_RE = re.compile(r'name="csrf_token" value="([^"]+)"')


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """
    data/
      notes/todo.md
      notes/draft.md      (yaml frontmatter, draft: true)
      readme.txt
      run.sh
      blob.bin
      .hidden.md
      sub/
    data-other/secret.md  (sibling sharing the "data" prefix)
    """
    base = tmp_path / "data"
    (base / "notes").mkdir(parents=True)
    (base / "sub").mkdir()
    (base / "notes" / "todo.md").write_text("# Todo\n\n- write tests\n", encoding="utf-8")
    (base / "notes" / "draft.md").write_text(
        "---\ntitle: Draft\ndraft: true\n---\nbody\n", encoding="utf-8"
    )
    (base / "readme.txt").write_text("plain text", encoding="utf-8")
    (base / "run.sh").write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
    (base / "blob.bin").write_bytes(b"\x00\x01\x02")
    (base / ".hidden.md").write_text("hidden", encoding="utf-8")

    other = tmp_path / "data-other"
    other.mkdir()
    (other / "secret.md").write_text("top secret", encoding="utf-8")
    return base


@pytest.fixture
def client(base_dir: Path):
    assert markdownWranglerApp.app is app
    app.config["TESTING"] = True
    configure(base_dir, secret=SECRET)
    with app.test_client() as c:
        yield c


def extract_csrf_token(html: str) -> str:
    m = _CSRF_RE.search(html)
    assert m, "no csrf_token field in page"
    return m.group(1)


@pytest.fixture
def csrf_token(client) -> str:
    resp = client.get("/edit?path=notes/todo.md")
    assert resp.status_code == 200
    return extract_csrf_token(resp.get_data(as_text=True))
