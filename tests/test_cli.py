"""Tests for CLI functionality."""
import json

import pytest
from click.testing import CliRunner
from git import Repo

from commitgate import __version__
from commitgate.cli import main
from commitgate.config import DEFAULT_CONFIG_FILENAME


@pytest.fixture
def cli_runner():
    """Fixture for testing CLI commands."""
    return CliRunner()


@pytest.fixture
def feature_repo(temp_git_repo):
    """Repository checked out on an unprotected branch."""
    Repo(temp_git_repo).create_head("feature/CDE-1-hooks").checkout()
    return temp_git_repo


def stage(repo_path, name, content):
    (repo_path / name).write_text(content)
    Repo(repo_path).index.add([name])


def test_version(cli_runner):
    result = cli_runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_without_command(cli_runner):
    result = cli_runner.invoke(main, [])
    assert result.exit_code == 0
    assert "pre-commit" in result.output
    assert "commit-msg" in result.output


def test_pre_commit_clean_changes(cli_runner, feature_repo):
    stage(feature_repo, "app.py", "def add(a, b):\n    return a + b\n")

    result = cli_runner.invoke(main, ["-p", str(feature_repo), "pre-commit"])

    assert result.exit_code == 0
    assert "All pre-commit checks passed" in result.output


def test_pre_commit_advisory_finding(cli_runner, feature_repo):
    stage(feature_repo, "app.js", 'console.log("x")\n')

    result = cli_runner.invoke(main, ["-p", str(feature_repo), "pre-commit"])

    assert result.exit_code == 0
    assert "Found 1 debug statement(s) in 1 file(s)" in result.output
    assert "app.js" in result.output


def test_pre_commit_conflict_markers_block(cli_runner, feature_repo):
    stage(feature_repo, "merge.py", "<<<<<<< HEAD\na = 1\n=======\na = 2\n>>>>>>> other\n")

    result = cli_runner.invoke(main, ["-p", str(feature_repo), "pre-commit"])

    assert result.exit_code == 1
    assert "Commit blocked" in result.output


def test_pre_commit_protected_branch(cli_runner, temp_git_repo):
    Repo(temp_git_repo).git.checkout("-B", "master")
    stage(temp_git_repo, "app.py", "x = 1\n")

    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "pre-commit"])

    assert result.exit_code == 1
    assert "Direct commits to 'master' are not allowed" in result.output
    assert "Merge conflict markers" not in result.output


def test_pre_commit_uses_repository_config(cli_runner, feature_repo):
    (feature_repo / DEFAULT_CONFIG_FILENAME).write_text(json.dumps({
        "pre-commit": {
            "protected_branches": ["feature/CDE-1-hooks"],
        }
    }))

    result = cli_runner.invoke(main, ["-p", str(feature_repo), "pre-commit"])

    assert result.exit_code == 1
    assert "not allowed" in result.output


def test_pre_commit_blocking_override(cli_runner, feature_repo, tmp_path_factory):
    config_path = tmp_path_factory.mktemp("config") / "hooks.json"
    config_path.write_text(json.dumps({
        "pre-commit": {"checks": {"debug_statements": {"blocking": True}}}
    }))
    stage(feature_repo, "app.js", 'console.log("x")\n')

    result = cli_runner.invoke(
        main, ["-p", str(feature_repo), "-c", str(config_path), "pre-commit"]
    )

    assert result.exit_code == 1


def test_pre_commit_outside_repository(cli_runner, tmp_path):
    result = cli_runner.invoke(main, ["-p", str(tmp_path), "pre-commit"])

    assert result.exit_code == 1
    assert "cannot read repository state" in result.output


def test_pre_commit_verbose_and_log_file(cli_runner, feature_repo):
    (feature_repo / DEFAULT_CONFIG_FILENAME).write_text(json.dumps({"log_file": "hooks.log"}))
    stage(feature_repo, "app.py", "x = 1\n")

    result = cli_runner.invoke(main, ["-p", str(feature_repo), "-v", "pre-commit"])

    assert result.exit_code == 0
    assert "conflict_markers: 0 finding(s)" in result.output
    assert "pre-commit passed" in (feature_repo / "hooks.log").read_text()


def test_pre_commit_unwritable_log_file_is_a_warning(cli_runner, feature_repo):
    (feature_repo / "hooks.log").mkdir()
    (feature_repo / DEFAULT_CONFIG_FILENAME).write_text(json.dumps({"log_file": "hooks.log"}))
    stage(feature_repo, "app.py", "x = 1\n")

    result = cli_runner.invoke(main, ["-p", str(feature_repo), "pre-commit"])

    assert result.exit_code == 0
    assert "cannot write log file" in result.output
    assert "All pre-commit checks passed" in result.output


def test_pre_commit_with_staged_submodule(cli_runner, feature_repo, tmp_path_factory):
    upstream_path = tmp_path_factory.mktemp("upstream")
    upstream = Repo.init(upstream_path)
    (upstream_path / "lib.py").write_text("x = 1\n")
    upstream.index.add(["lib.py"])
    commit = upstream.index.commit("Add lib")
    Repo(feature_repo).git.update_index("--add", "--cacheinfo", f"160000,{commit.hexsha},vendor")

    result = cli_runner.invoke(main, ["-p", str(feature_repo), "pre-commit"])

    assert result.exit_code == 0
    assert "All pre-commit checks passed" in result.output

def test_commit_msg_valid(cli_runner, temp_git_repo):
    message_file = temp_git_repo / "COMMIT_EDITMSG"
    message_file.write_text("CDE-123: feat: Add user authentication\n")

    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "commit-msg", str(message_file)])

    assert result.exit_code == 0
    assert "Commit message format is valid" in result.output
    assert "CDE-123" in result.output


@pytest.mark.parametrize("message, expected", [
    ("Add feature", "Missing Jira ticket"),
    ("CDE-123: Add feature", "Missing commit type"),
    ("CDE-123: feature: Add auth", "Invalid type 'feature'"),
])
def test_commit_msg_rejected(cli_runner, temp_git_repo, message, expected):
    message_file = temp_git_repo / "COMMIT_EDITMSG"
    message_file.write_text(message + "\n")

    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "commit-msg", str(message_file)])

    assert result.exit_code == 1
    assert expected in result.output
    assert "Expected format" in result.output


def test_commit_msg_missing_file(cli_runner, temp_git_repo):
    result = cli_runner.invoke(
        main, ["-p", str(temp_git_repo), "commit-msg", str(temp_git_repo / "missing")]
    )

    assert result.exit_code == 1
    assert "cannot read commit message file" in result.output


def test_commit_msg_outside_repository(cli_runner, tmp_path):
    message_file = tmp_path / "msg"
    message_file.write_text("CDE-9: fix: Handle empty payloads\n")

    result = cli_runner.invoke(main, ["-p", str(tmp_path), "commit-msg", str(message_file)])

    assert result.exit_code == 0


def test_config_list(cli_runner, temp_git_repo):
    (temp_git_repo / DEFAULT_CONFIG_FILENAME).write_text(json.dumps({
        "commit-msg": {"jira_project": "OPS"},
        "pre-commit": {"checks": {"todo_comments": {"enabled": False}}},
    }))

    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "config-list"])

    assert result.exit_code == 0
    assert "Config file:" in result.output
    assert "OPS" in result.output
    assert "disabled, advisory" in result.output


def test_config_list_defaults(cli_runner, temp_git_repo):
    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "config-list"])

    assert result.exit_code == 0
    assert "Using default values" in result.output


def test_install_writes_hooks_and_config(cli_runner, temp_git_repo):
    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "install"])

    assert result.exit_code == 0
    hooks_dir = temp_git_repo / ".git" / "hooks"
    assert "commitgate pre-commit" in (hooks_dir / "pre-commit").read_text()
    assert "commitgate commit-msg" in (hooks_dir / "commit-msg").read_text()
    document = json.loads((temp_git_repo / DEFAULT_CONFIG_FILENAME).read_text())
    assert document["commit-msg"]["jira_project"] == "CDE"


def test_install_asks_before_overwriting(cli_runner, temp_git_repo):
    hooks_dir = temp_git_repo / ".git" / "hooks"
    hooks_dir.mkdir(exist_ok=True)
    (hooks_dir / "pre-commit").write_text("#!/bin/sh\nexit 0\n")

    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "install"], input="n\n")

    assert result.exit_code == 0
    assert "Installation cancelled" in result.output
    assert (hooks_dir / "pre-commit").read_text() == "#!/bin/sh\nexit 0\n"

    result = cli_runner.invoke(main, ["-p", str(temp_git_repo), "install", "--force", "--no-config"])

    assert result.exit_code == 0
    assert "commitgate" in (hooks_dir / "pre-commit").read_text()
    assert not (temp_git_repo / DEFAULT_CONFIG_FILENAME).exists()


def test_install_outside_repository(cli_runner, tmp_path):
    result = cli_runner.invoke(main, ["-p", str(tmp_path), "install"])

    assert result.exit_code == 1
    assert "Not a git repository" in result.output
