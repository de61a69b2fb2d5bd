"""Staged change collection through GitPython."""
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .models import AddedLine, ChangeSet, FileStatus, StagedFile

GITLINK_MODE = "160000"

_HUNK_HEADER = re.compile(r"^@@ -\d+(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_STATUS_CODES = {
    "A": FileStatus.ADDED,
    "C": FileStatus.ADDED,
    "M": FileStatus.MODIFIED,
    "T": FileStatus.MODIFIED,
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
}


class ProviderError(RuntimeError):
    """Raised when the repository state cannot be read."""


def parse_added_lines(patch: str) -> List[AddedLine]:
    """Extract added lines with their new-file line numbers from a diff.

    Hunk line counts are tracked so that an added line whose own text
    starts with ``++`` is never mistaken for a file header.
    """
    added: List[AddedLine] = []
    old_remaining = new_remaining = 0
    next_line = 0

    for raw in patch.split("\n"):
        if old_remaining > 0 or new_remaining > 0:
            if raw.startswith("+"):
                added.append(AddedLine(next_line, raw[1:]))
                next_line += 1
                new_remaining -= 1
            elif raw.startswith("-"):
                old_remaining -= 1
            elif raw.startswith("\\"):
                continue
            else:
                old_remaining -= 1
                new_remaining -= 1
                next_line += 1
            continue

        match = _HUNK_HEADER.match(raw)
        if match:
            old_count, new_start, new_count = match.groups()
            old_remaining = int(old_count) if old_count is not None else 1
            new_remaining = int(new_count) if new_count is not None else 1
            next_line = int(new_start)

    return added


def _parse_name_status(output: bytes) -> Iterator[Tuple[str, FileStatus, Optional[str]]]:
    """Yield ``(path, status, old_path)`` from ``--name-status -z`` output."""
    tokens = [token.decode("utf-8", errors="surrogateescape") for token in output.split(b"\0")]
    tokens = [token for token in tokens if token]
    index = 0
    while index < len(tokens):
        code = tokens[index][0]
        status = _STATUS_CODES.get(code, FileStatus.MODIFIED)
        if code in ("R", "C"):
            old_path, path = tokens[index + 1], tokens[index + 2]
            index += 3
            yield path, status, old_path if code == "R" else None
        else:
            path = tokens[index + 1]
            index += 2
            yield path, status, None


class GitChangeProvider:
    """Reads the pending commit from the Git index.

    All queries are read-only; Git holds the index lock while hooks run.
    """

    def __init__(self, repo_path: str):
        try:
            self.repo = Repo(repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise ProviderError(f"Not a git repository: {repo_path}") from e
        self.repo_path = repo_path

    @property
    def root(self) -> Path:
        return Path(self.repo.working_tree_dir or self.repo_path)

    def _git(self, *args: str) -> bytes:
        try:
            return self.repo.git.execute(
                ["git", *args], stdout_as_string=False, strip_newline_in_stdout=False
            )
        except GitCommandError as e:
            raise ProviderError(f"git {' '.join(args)} failed: {e.stderr or e}") from e

    def current_branch(self) -> Optional[str]:
        """Name of the checked out branch, or None on a detached HEAD."""
        try:
            return self.repo.active_branch.name
        except TypeError:
            return None

    def _binary_paths(self) -> Dict[str, bool]:
        binary: Dict[str, bool] = {}
        output = self._git("diff", "--cached", "--numstat", "-z", "-M", "--no-color")
        tokens = output.split(b"\0")
        index = 0
        while index < len(tokens):
            entry = tokens[index]
            index += 1
            if not entry:
                continue
            added, deleted, path = entry.split(b"\t", 2)
            if not path:
                # Renames report the old and new path as the next two tokens
                path = tokens[index + 1]
                index += 2
            binary[path.decode("utf-8", errors="surrogateescape")] = added == b"-" and deleted == b"-"
        return binary

    def _index_modes(self) -> Dict[str, str]:
        """Map staged paths to their index file mode."""
        modes: Dict[str, str] = {}
        for entry in self._git("ls-files", "--stage", "-z").split(b"\0"):
            if not entry:
                continue
            meta, path = entry.split(b"\t", 1)
            modes[path.decode("utf-8", errors="surrogateescape")] = meta.split()[0].decode("ascii")
        return modes

    def _blob_size(self, path: str) -> int:
        return int(self._git("cat-file", "-s", f":{path}").strip() or 0)

    def _added_lines(self, path: str, old_path: Optional[str]) -> List[AddedLine]:
        paths = [old_path, path] if old_path else [path]
        patch = self._git(
            "diff", "--cached", "--unified=0", "--no-color", "--no-ext-diff", "-M", "--", *paths
        )
        return parse_added_lines(patch.decode("utf-8", errors="replace"))

    def get_staged_changes(self) -> ChangeSet:
        """Collect the files staged for the pending commit.

        Returns:
            ChangeSet: One entry per staged path, in Git's path order

        Raises:
            ProviderError: If Git cannot be queried
        """
        name_status = self._git("diff", "--cached", "--name-status", "-z", "-M", "--no-color")
        binary = self._binary_paths()
        modes = self._index_modes()

        files: List[StagedFile] = []
        for path, status, old_path in _parse_name_status(name_status):
            if status is FileStatus.DELETED:
                files.append(StagedFile(path=path, status=status))
                continue

            if modes.get(path) == GITLINK_MODE:
                # The submodule commit lives in another object store
                files.append(StagedFile(path=path, status=status, is_submodule=True))
                continue

            is_binary = binary.get(path, False)
            files.append(StagedFile(
                path=path,
                status=status,
                size_bytes=self._blob_size(path),
                added_lines=[] if is_binary else self._added_lines(path, old_path),
                is_binary=is_binary,
            ))

        return ChangeSet(files=files)
