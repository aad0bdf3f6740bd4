import datetime
import posixpath
from pathlib import Path

import pytest

from merger.smartmerge.adapters.vault import DocumentRef, FsVault
from merger.smartmerge.core import clock
from merger.smartmerge.core.errors import DocumentCreateError, DocumentReadError

FROZEN_NOW = datetime.datetime(2025, 2, 23, 15, 30, 45)


class MemoryStore:
    """In-memory document store. Paths listed in ``broken`` fail to read."""

    def __init__(self, docs=None, broken=()):
        self.docs = dict(docs or {})
        self.broken = set(broken)
        self.created = {}
        self.fail_create = False
        self.list_calls = 0

    def list_documents(self):
        self.list_calls += 1
        refs = []
        for path in self.docs:
            base = posixpath.splitext(posixpath.basename(path))[0]
            refs.append(DocumentRef(base_name=base, full_path=path))
        return refs

    def read(self, doc):
        if doc.full_path in self.broken:
            raise DocumentReadError(doc.full_path, "permission denied")
        return self.docs[doc.full_path]

    def create(self, name, content):
        if self.fail_create or name in self.docs or name in self.created:
            raise DocumentCreateError(name, "file already exists")
        self.created[name] = content


class MemorySinkFS:
    """External sink over a dict; ``fail_write`` makes every write raise."""

    def __init__(self):
        self.files = {}
        self.dirs = set()
        self.fail_write = False

    def ensure_dir(self, path):
        self.dirs.add(path)

    def exists(self, path):
        return path in self.files

    def write(self, path, content):
        if self.fail_write:
            raise OSError("disk full")
        self.files[path] = content

    def join(self, *parts):
        return posixpath.join(*parts)

    def split_ext(self, name):
        return posixpath.splitext(name)


@pytest.fixture
def frozen_clock():
    with clock.frozen(FROZEN_NOW):
        yield FROZEN_NOW


@pytest.fixture
def memory_store():
    return MemoryStore({
        "b/Beta.md": "beta body",
        "Alpha.md": "alpha body",
        "c/Gamma.md": "gamma body",
    })


@pytest.fixture
def memory_sink():
    return MemorySinkFS()


@pytest.fixture
def vault_dir(tmp_path):
    root = tmp_path / "vault"
    root.mkdir()
    (root / "Alpha.md").write_text("alpha body", encoding="utf-8")
    (root / "notes").mkdir()
    (root / "notes" / "Beta.md").write_text("beta body", encoding="utf-8")
    (root / "notes" / "image.png").write_bytes(b"\x89PNG")
    (root / ".obsidian").mkdir()
    (root / ".obsidian" / "workspace.md").write_text("ignored", encoding="utf-8")
    return root


@pytest.fixture
def fs_vault(vault_dir):
    return FsVault(vault_dir)
