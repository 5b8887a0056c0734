import pytest


@pytest.fixture(autouse=True)
def conplug_env(monkeypatch, tmp_path):
    monkeypatch.setenv("CONPLUG_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("CONPLUG_LOG_JSON", "0")
    monkeypatch.delenv("CONPLUG_INCLUDE_GIT_IGNORED", raising=False)
    monkeypatch.delenv("CONPLUG_MAX_CONTENT_BYTES", raising=False)


@pytest.fixture
def make_tree(tmp_path):
    """Creates a directory tree from {relative path: content}; returns the resolved root."""
    def _make(files, root_name="ws"):
        root = tmp_path / root_name
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            p = root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                p.write_bytes(content)
            else:
                p.write_text(content, encoding="utf-8")
        return root.resolve()
    return _make
