"""
Tests for staged file changes: proposals, the single-outstanding-set rule,
previews and best-effort apply.
"""

import pytest

from devtask.tools.staging import FilePatch, PatchKind, StagedChanges
from devtask.utils.errors import StagingConflictError, UnsafePathError


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("print('a')\n")
    (tmp_path / "old.txt").write_text("velho\n")
    return tmp_path


@pytest.fixture
def changes(project):
    return StagedChanges(project)


class TestProposals:
    """propose_create / propose_modify / propose_delete."""

    def test_create_stages_without_writing(self, changes, project):
        assert changes.propose_create("src/new.py", "x = 1\n") is True
        assert changes.has_pending_changes()
        assert not (project / "src" / "new.py").exists()

    def test_create_existing_file_fails(self, changes):
        with pytest.raises(FileExistsError):
            changes.propose_create("old.txt", "x")
        assert not changes.has_pending_changes()

    def test_modify_identical_content_is_noop(self, changes):
        assert changes.propose_modify("src/app.py", "print('a')\n") is False
        assert not changes.has_pending_changes()
        assert changes.get_pending_changes() == []

    def test_modify_snapshots_original(self, changes):
        changes.propose_modify("./src//app.py", "print('b')\n")
        [patch] = changes.get_pending_changes()
        assert patch.kind == PatchKind.MODIFY
        assert patch.path == "src/app.py"
        assert patch.original_content == "print('a')\n"
        assert patch.new_content == "print('b')\n"

    def test_modify_missing_file_fails(self, changes):
        with pytest.raises(FileNotFoundError):
            changes.propose_modify("nope.py", "x")

    def test_delete_missing_file_fails(self, changes):
        with pytest.raises(FileNotFoundError):
            changes.propose_delete("nope.py")

    @pytest.mark.parametrize("path", ["../escape.txt", ".env", ".git/config"])
    def test_unsafe_paths_are_rejected(self, changes, path):
        with pytest.raises(UnsafePathError):
            changes.propose_create(path, "x")
        assert not changes.has_pending_changes()


class TestSingleOutstandingSet:
    """Only one change-set may be pending at a time."""

    @pytest.mark.parametrize(
        "second",
        [
            lambda c: c.propose_create("other.txt", "x"),
            lambda c: c.propose_modify("old.txt", "novo\n"),
            lambda c: c.propose_delete("old.txt"),
            lambda c: c.propose_delete("src/app.py"),
        ],
    )
    def test_any_second_proposal_conflicts(self, changes, second):
        changes.propose_modify("src/app.py", "print('b')\n")
        with pytest.raises(StagingConflictError) as exc_info:
            second(changes)
        assert exc_info.value.pending == 1
        assert len(changes.get_pending_changes()) == 1

    def test_clear_allows_new_proposal(self, changes):
        changes.propose_delete("old.txt")
        changes.clear_pending_changes()
        assert changes.propose_create("other.txt", "x") is True

    def test_apply_allows_new_proposal(self, changes):
        changes.propose_delete("old.txt")
        assert changes.apply_changes().success
        assert changes.propose_create("other.txt", "x") is True


class TestPreview:
    """show_pending_changes rendering."""

    def test_empty_preview(self, changes):
        assert changes.show_pending_changes() == "Não há alterações pendentes."

    def test_modify_preview_shows_diff(self, changes):
        changes.propose_modify("src/app.py", "print('b')\n")
        preview = changes.show_pending_changes()
        assert "✏️ MODIFICAR: src/app.py" in preview
        assert "-print('a')" in preview
        assert "+print('b')" in preview
        assert "Remover (src/app.py)" in preview
        assert "Adicionar (src/app.py)" in preview
        assert "!apply" in preview and "!cancel" in preview

    def test_create_and_delete_preview_show_content(self, project):
        created = StagedChanges(project)
        created.propose_create("novo.txt", "conteúdo novo")
        assert "➕ CRIAR: novo.txt" in created.show_pending_changes()
        assert "conteúdo novo" in created.show_pending_changes()

        deleted = StagedChanges(project)
        deleted.propose_delete("old.txt")
        assert "❌ EXCLUIR: old.txt" in deleted.show_pending_changes()
        assert "velho" in deleted.show_pending_changes()


class TestApply:
    """apply_changes writes, counts and clears."""

    def test_apply_nothing(self, changes):
        result = changes.apply_changes()
        assert result.success is False
        assert result.message == "Não há alterações pendentes para aplicar."

    def test_apply_mixed_set(self, changes, project):
        # A mixed set cannot be built through propose_*; stage it directly
        changes._pending = {
            "docs/new.md": FilePatch(PatchKind.CREATE, "docs/new.md", new_content="# Novo\n"),
            "src/app.py": FilePatch(
                PatchKind.MODIFY, "src/app.py", new_content="print('b')\n", original_content="print('a')\n"
            ),
            "old.txt": FilePatch(PatchKind.DELETE, "old.txt", original_content="velho\n"),
        }

        result = changes.apply_changes()

        assert result.success is True
        assert (result.created, result.modified, result.deleted) == (1, 1, 1)
        assert result.message == (
            "✅ Alterações aplicadas com sucesso: 1 arquivos criados, 1 modificados, 1 excluídos."
        )
        assert (project / "docs" / "new.md").read_text(encoding="utf-8") == "# Novo\n"
        assert (project / "src" / "app.py").read_text() == "print('b')\n"
        assert not (project / "old.txt").exists()
        assert not changes.has_pending_changes()

    def test_partial_failure_keeps_remaining_patches(self, changes, project):
        changes._pending = {
            "first.txt": FilePatch(PatchKind.CREATE, "first.txt", new_content="1"),
            "old.txt/child.txt": FilePatch(PatchKind.CREATE, "old.txt/child.txt", new_content="2"),
            "third.txt": FilePatch(PatchKind.CREATE, "third.txt", new_content="3"),
        }

        result = changes.apply_changes()

        assert result.success is False
        assert result.created == 1
        assert "old.txt/child.txt" in result.message
        assert (project / "first.txt").exists()
        assert not (project / "third.txt").exists()
        assert [patch.path for patch in changes.get_pending_changes()] == ["old.txt/child.txt", "third.txt"]

    def test_to_dict(self, changes):
        changes.propose_create("a.txt", "x")
        result = changes.apply_changes()
        assert result.to_dict() == {
            "success": True,
            "message": result.message,
            "created": 1,
            "modified": 0,
            "deleted": 0,
        }
