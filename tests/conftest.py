import pytest
from git import Repo

from commitgate.config import Config
from commitgate.models import AddedLine, ChangeSet, FileStatus, StagedFile


@pytest.fixture
def temp_git_repo(tmp_path):
    """Create a temporary git repository with one commit."""
    repo = Repo.init(tmp_path)

    test_file = tmp_path / "test.txt"
    test_file.write_text("Initial content\n")

    repo.index.add(["test.txt"])
    repo.index.commit("Initial commit")

    return tmp_path


@pytest.fixture
def empty_git_repo(tmp_path):
    """Create a temporary git repository without any commit."""
    Repo.init(tmp_path)
    return tmp_path


@pytest.fixture
def default_config():
    return Config()


def _staged_file(path, *lines, status=FileStatus.MODIFIED, size_bytes=None, is_binary=False):
    """Build a StagedFile whose added lines are numbered from 1."""
    added = [AddedLine(number, text) for number, text in enumerate(lines, start=1)]
    if size_bytes is None:
        size_bytes = sum(len(text) + 1 for text in lines)
    return StagedFile(
        path=path,
        status=status,
        size_bytes=size_bytes,
        added_lines=added,
        is_binary=is_binary,
    )


@pytest.fixture
def make_changeset():
    def _make(*files):
        return ChangeSet(files=list(files))
    return _make


@pytest.fixture
def make_file():
    return _staged_file
