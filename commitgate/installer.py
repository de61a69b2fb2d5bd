"""Installation of the hook shims into a repository."""
import stat
import sys
from pathlib import Path
from typing import Dict, List

HOOK_MARKER = "# Installed by commitgate"

HOOK_COMMANDS = {
    "pre-commit": "pre-commit",
    "commit-msg": 'commit-msg "$1"',
}


def hook_script(hook_name: str, python: str = sys.executable) -> str:
    """Shell shim that forwards a Git hook to the commitgate CLI."""
    return (
        "#!/bin/sh\n"
        f"{HOOK_MARKER}\n"
        f'exec "{python}" -m commitgate {HOOK_COMMANDS[hook_name]}\n'
    )


def existing_hooks(hooks_dir: Path) -> List[str]:
    return [name for name in HOOK_COMMANDS if (hooks_dir / name).exists()]


def install_hooks(hooks_dir: Path, python: str = sys.executable) -> Dict[str, Path]:
    """Write executable hook shims, replacing whatever is there.

    Returns:
        Dict[str, Path]: Hook name to the file written
    """
    hooks_dir.mkdir(parents=True, exist_ok=True)
    installed = {}
    for hook_name in HOOK_COMMANDS:
        hook_path = hooks_dir / hook_name
        hook_path.write_text(hook_script(hook_name, python), encoding="utf-8")
        mode = hook_path.stat().st_mode
        hook_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        installed[hook_name] = hook_path
    return installed
