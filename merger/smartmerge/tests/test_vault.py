import pytest

from merger.smartmerge.adapters.vault import DocumentRef
from merger.smartmerge.core.errors import DocumentCreateError, DocumentReadError
from merger.smartmerge.core.merge import run_merge
from merger.smartmerge.core.selector import select_all


def test_list_documents_skips_hidden_dirs_and_non_notes(fs_vault):
    docs = sorted(fs_vault.list_documents(), key=lambda d: d.full_path)
    assert docs == [
        DocumentRef(base_name="Alpha", full_path="Alpha.md"),
        DocumentRef(base_name="Beta", full_path="notes/Beta.md"),
    ]


def test_read_returns_content(fs_vault):
    assert fs_vault.read(DocumentRef("Beta", "notes/Beta.md")) == "beta body"


def test_read_missing_raises_document_read_error(fs_vault):
    with pytest.raises(DocumentReadError) as exc:
        fs_vault.read(DocumentRef("Gone", "Gone.md"))
    assert exc.value.path == "Gone.md"


def test_create_writes_top_level_file(fs_vault, vault_dir):
    fs_vault.create("Merged.md", "content")
    assert (vault_dir / "Merged.md").read_text(encoding="utf-8") == "content"


def test_create_refuses_to_overwrite(fs_vault, vault_dir):
    with pytest.raises(DocumentCreateError):
        fs_vault.create("Alpha.md", "new")
    assert (vault_dir / "Alpha.md").read_text(encoding="utf-8") == "alpha body"


def test_create_rejects_nested_names(fs_vault):
    with pytest.raises(DocumentCreateError):
        fs_vault.create("notes/Merged.md", "x")


def test_read_keeps_crlf_line_endings(vault_dir, fs_vault):
    (vault_dir / "Windows.md").write_bytes(b"line1\r\nline2\r\n")
    assert fs_vault.read(DocumentRef("Windows", "Windows.md")) == "line1\r\nline2\r\n"


def test_create_writes_content_byte_for_byte(fs_vault, vault_dir):
    fs_vault.create("Merged.md", "a\nb\r\nc")
    assert (vault_dir / "Merged.md").read_bytes() == b"a\nb\r\nc"


def test_invalid_utf8_note_becomes_read_error_placeholder(vault_dir, fs_vault, frozen_clock):
    (vault_dir / "Broken.md").write_bytes(b"\xff\xfe not utf-8")
    with pytest.raises(DocumentReadError):
        fs_vault.read(DocumentRef("Broken", "Broken.md"))

    units = []
    summary = run_merge(select_all(fs_vault), fs_vault, units.append)

    assert summary.processed_count == 3
    assert summary.read_errors == ["Broken.md"]
    assert units[0].content == (
        "\n\n## Alpha\n\nalpha body"
        "\n\n## Broken (read error)\n\n"
        "\n\n## Beta\n\nbeta body"
    )
