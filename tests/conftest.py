import logging

import pytest


def make_tree(root, files):
    """Create ``files`` (relative path -> bytes or str) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def tree(tmp_path):
    """a.txt at the top, sub/b.txt one level down."""
    root = tmp_path / "project"
    return make_tree(root, {"a.txt": "alpha\n", "sub/b.txt": "beta\n"})


@pytest.fixture(autouse=True)
def reset_foldercopy_logger():
    base = logging.getLogger("foldercopy")
    handlers, level, propagate = list(base.handlers), base.level, base.propagate
    yield
    for handler in list(base.handlers):
        if handler not in handlers:
            base.removeHandler(handler)
    base.setLevel(level)
    base.propagate = propagate
