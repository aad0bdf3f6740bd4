# -*- coding: utf-8 -*-

"""
Document store seam.

The merge core only needs three things from the host: list documents, read
one, create a new one at the top level. ``FsVault`` implements that on a
plain directory of Markdown notes.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol

from ..core.errors import DocumentReadError, DocumentCreateError

logger = logging.getLogger(__name__)

NOTE_EXTENSIONS = {".md"}

# Host metadata and our own settings never count as notes.
SKIP_DIRS = {
    ".git",
    ".obsidian",
    ".smartmerge",
    ".trash",
}


@dataclass(frozen=True)
class DocumentRef:
    base_name: str
    full_path: str


class DocumentStore(Protocol):
    def list_documents(self) -> List[DocumentRef]:
        ...

    def read(self, doc: DocumentRef) -> str:
        ...

    def create(self, name: str, content: str) -> None:
        ...


class FsVault:
    """A vault backed by a directory tree of ``.md`` files."""

    def __init__(self, root: Path, encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding

    def _is_skipped(self, rel: Path) -> bool:
        return any(part in SKIP_DIRS or part.startswith(".") for part in rel.parts[:-1])

    def list_documents(self) -> List[DocumentRef]:
        docs = []
        if not self.root.is_dir():
            return docs
        for p in self.root.rglob("*"):
            if p.suffix.lower() not in NOTE_EXTENSIONS or not p.is_file():
                continue
            rel = p.relative_to(self.root)
            if self._is_skipped(rel):
                continue
            docs.append(DocumentRef(base_name=p.stem, full_path=rel.as_posix()))
        return docs

    def read(self, doc: DocumentRef) -> str:
        p = self.root / doc.full_path
        try:
            # newline="" keeps \r\n as stored
            with p.open("r", encoding=self.encoding, newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(doc.full_path, e) from e

    def create(self, name: str, content: str) -> None:
        if "/" in name or "\\" in name or "\0" in name:
            raise DocumentCreateError(name, "name must not contain path separators")
        p = self.root / name
        try:
            # 'x' refuses to clobber an existing note
            with p.open("x", encoding=self.encoding, newline="") as f:
                f.write(content)
        except FileExistsError as e:
            raise DocumentCreateError(name, "file already exists") from e
        except OSError as e:
            raise DocumentCreateError(name, e) from e
        logger.debug(f"Created vault document {p}")
