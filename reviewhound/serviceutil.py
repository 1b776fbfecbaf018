"""Locate the git repository around the working directory."""

from __future__ import annotations

import os

_BARE_MARKERS = ("HEAD", "objects", "refs")


def _is_git_dir(path: str) -> bool:
    for marker in _BARE_MARKERS:
        try:
            os.stat(os.path.join(path, marker))
        except FileNotFoundError:
            return False
    return True


def _find_dot_git_path(path: str) -> str:
    path = os.path.abspath(path)
    while True:
        dot_git = os.path.join(path, ".git")
        try:
            is_dir = os.path.isdir(dot_git) if os.stat(dot_git) else False
        except FileNotFoundError:
            pass
        else:
            if not is_dir:
                raise NotADirectoryError(".git exists but is not a directory")
            return dot_git

        if _is_git_dir(path):
            return path

        parent = os.path.dirname(path)
        if parent == path:
            raise FileNotFoundError(".git not found")
        path = parent


def find_git_root(path: str) -> str:
    """Return the root directory of the repository containing path."""
    return os.path.dirname(_find_dot_git_path(path))


def git_rel_workdir() -> str:
    """Return the working directory relative to the repository root.

    The result is empty at the root, otherwise it ends with a separator,
    as `git rev-parse --show-prefix` prints it.
    """
    cwd = os.getcwd()
    root = find_git_root(cwd)
    if not cwd.startswith(root):
        raise ValueError(f"cannot get git relative workdir: cwd={cwd!r}, root={root!r}")
    rel = cwd[len(root):].strip(os.sep)
    return rel + os.sep if rel else rel