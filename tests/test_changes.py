"""Tests for staged change collection."""
from pathlib import Path

import pytest
from git import Repo

from commitgate.changes import GitChangeProvider, ProviderError, parse_added_lines
from commitgate.models import AddedLine, FileStatus


def by_path(changeset):
    return {staged.path: staged for staged in changeset}


def test_parse_added_lines_tracks_line_numbers():
    patch = (
        "diff --git a/app.py b/app.py\n"
        "index 1111111..2222222 100644\n"
        "--- a/app.py\n"
        "+++ b/app.py\n"
        "@@ -2,0 +3,2 @@ def main():\n"
        "+    x = 1\n"
        "+    y = 2\n"
        "@@ -10 +12 @@\n"
        "-old\n"
        "+new\n"
    )
    assert parse_added_lines(patch) == [
        AddedLine(3, "    x = 1"),
        AddedLine(4, "    y = 2"),
        AddedLine(12, "new"),
    ]


def test_parse_added_lines_keeps_lines_that_look_like_headers():
    patch = (
        "--- /dev/null\n"
        "+++ b/notes.md\n"
        "@@ -0,0 +1,2 @@\n"
        "+++ not a header\n"
        "+--- also content\n"
    )
    assert parse_added_lines(patch) == [
        AddedLine(1, "++ not a header"),
        AddedLine(2, "--- also content"),
    ]


def test_parse_added_lines_ignores_no_newline_marker():
    patch = "@@ -1 +1 @@\n-a\n\\ No newline at end of file\n+b\n\\ No newline at end of file\n"
    assert parse_added_lines(patch) == [AddedLine(1, "b")]


def test_not_a_repository(tmp_path):
    with pytest.raises(ProviderError):
        GitChangeProvider(str(tmp_path))


def test_no_staged_changes(temp_git_repo):
    provider = GitChangeProvider(str(temp_git_repo))
    assert len(provider.get_staged_changes()) == 0


def test_added_and_modified_files(temp_git_repo):
    repo = Repo(temp_git_repo)
    (temp_git_repo / "test.txt").write_text("Initial content\nconsole.log('x')\n")
    (temp_git_repo / "new.py").write_text("print('hi')\n# TODO: tidy\n")
    repo.index.add(["test.txt", "new.py"])

    changes = by_path(GitChangeProvider(str(temp_git_repo)).get_staged_changes())

    assert changes["test.txt"].status is FileStatus.MODIFIED
    assert changes["test.txt"].added_lines == [AddedLine(2, "console.log('x')")]
    assert changes["test.txt"].size_bytes == len("Initial content\nconsole.log('x')\n")

    assert changes["new.py"].status is FileStatus.ADDED
    assert [line.text for line in changes["new.py"].added_lines] == ["print('hi')", "# TODO: tidy"]
    assert changes["new.py"].is_binary is False


def test_unstaged_changes_are_ignored(temp_git_repo):
    (temp_git_repo / "test.txt").write_text("changed but not staged\n")

    assert len(GitChangeProvider(str(temp_git_repo)).get_staged_changes()) == 0


def test_deleted_file(temp_git_repo):
    repo = Repo(temp_git_repo)
    (temp_git_repo / "test.txt").unlink()
    repo.index.remove(["test.txt"])

    changes = by_path(GitChangeProvider(str(temp_git_repo)).get_staged_changes())

    deleted = changes["test.txt"]
    assert deleted.status is FileStatus.DELETED
    assert deleted.added_lines == []
    assert deleted.is_scannable is False


def test_binary_file(temp_git_repo):
    repo = Repo(temp_git_repo)
    (temp_git_repo / "image.png").write_bytes(b'\x89PNG\r\n\x1a\n' + b'\x00' * 100)
    repo.index.add(["image.png"])

    changes = by_path(GitChangeProvider(str(temp_git_repo)).get_staged_changes())

    image = changes["image.png"]
    assert image.is_binary is True
    assert image.added_lines == []
    assert image.size_bytes == 108


def test_renamed_file_only_reports_new_lines(temp_git_repo):
    repo = Repo(temp_git_repo)
    content = "".join(f"line {n}\n" for n in range(20))
    (temp_git_repo / "old_name.txt").write_text(content)
    repo.index.add(["old_name.txt"])
    repo.index.commit("Add file to rename")

    (temp_git_repo / "old_name.txt").unlink()
    (temp_git_repo / "new_name.txt").write_text(content + "appended\n")
    repo.index.remove(["old_name.txt"])
    repo.index.add(["new_name.txt"])

    changes = by_path(GitChangeProvider(str(temp_git_repo)).get_staged_changes())

    renamed = changes["new_name.txt"]
    assert renamed.status is FileStatus.RENAMED
    assert renamed.added_lines == [AddedLine(21, "appended")]
    assert "old_name.txt" not in changes


def test_empty_file(temp_git_repo):
    repo = Repo(temp_git_repo)
    (temp_git_repo / "empty.txt").write_text("")
    repo.index.add(["empty.txt"])

    changes = by_path(GitChangeProvider(str(temp_git_repo)).get_staged_changes())
    assert changes["empty.txt"].size_bytes == 0
    assert changes["empty.txt"].status is FileStatus.ADDED


def test_first_commit_in_empty_repository(empty_git_repo):
    repo = Repo(empty_git_repo)
    (empty_git_repo / "README.md").write_text("# Project\n")
    repo.index.add(["README.md"])

    changes = by_path(GitChangeProvider(str(empty_git_repo)).get_staged_changes())
    assert changes["README.md"].status is FileStatus.ADDED
    assert changes["README.md"].added_lines == [AddedLine(1, "# Project")]


def test_current_branch(temp_git_repo):
    repo = Repo(temp_git_repo)
    repo.create_head("feature/CDE-1-login").checkout()

    assert GitChangeProvider(str(temp_git_repo)).current_branch() == "feature/CDE-1-login"


def test_current_branch_detached_head(temp_git_repo):
    repo = Repo(temp_git_repo)
    repo.head.reference = repo.head.commit

    assert GitChangeProvider(str(temp_git_repo)).current_branch() is None


def test_provider_from_subdirectory(temp_git_repo):
    subdir = temp_git_repo / "src"
    subdir.mkdir()

    provider = GitChangeProvider(str(subdir))
    assert Path(provider.root).resolve() == Path(temp_git_repo).resolve()


def test_staged_submodule(temp_git_repo, tmp_path_factory):
    upstream_path = tmp_path_factory.mktemp("upstream")
    upstream = Repo.init(upstream_path)
    (upstream_path / "lib.py").write_text("x = 1\n")
    upstream.index.add(["lib.py"])
    commit = upstream.index.commit("Add lib")

    repo = Repo(temp_git_repo)
    # Gitlink entry pointing at a commit that only exists upstream
    repo.git.update_index("--add", "--cacheinfo", f"160000,{commit.hexsha},vendor")
    (temp_git_repo / "app.py").write_text("import vendor\n")
    repo.index.add(["app.py"])

    changes = by_path(GitChangeProvider(str(temp_git_repo)).get_staged_changes())

    vendor = changes["vendor"]
    assert vendor.status is FileStatus.ADDED
    assert vendor.is_submodule is True
    assert vendor.is_scannable is False
    assert vendor.added_lines == []
    assert vendor.size_bytes == 0
    assert changes["app.py"].added_lines == [AddedLine(1, "import vendor")]
