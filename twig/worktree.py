"""
File primitives over the user's working directory.

Paths handed in and out are relative to the working directory and use
forward slashes regardless of platform.
"""

import os
from pathlib import Path, PurePosixPath
from typing import List

from .logging import get_twig_logger


class WorkingTree:
    """Read, write, list and delete files under a working directory."""

    def __init__(self, root: Path, repo_dir_name: str = ".twig"):
        self.root = root
        self.repo_dir_name = repo_dir_name
        self.log = get_twig_logger("worktree")

    def normalize(self, path: str) -> str:
        """
        Turn a user-supplied path into a working-tree relative POSIX path.

        Absolute paths inside the working directory are made relative.
        """
        candidate = Path(path)
        if candidate.is_absolute():
            candidate = candidate.resolve().relative_to(self.root.resolve())
        return PurePosixPath(*candidate.parts).as_posix()

    def _full_path(self, path: str) -> Path:
        return self.root.joinpath(*PurePosixPath(path).parts)

    def exists(self, path: str) -> bool:
        return self._full_path(path).is_file()

    def read_file(self, path: str) -> bytes:
        return self._full_path(path).read_bytes()

    def write_file(self, path: str, content: bytes) -> None:
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
        self.log.debug("Wrote {path} ({size} bytes)", path=path, size=len(content))

    def delete_file(self, path: str) -> None:
        """
        Delete a file if present; missing files are ignored.

        Parent directories left empty are removed up to the working directory.
        """
        full_path = self._full_path(path)
        if full_path.is_file():
            full_path.unlink()
            self._prune_empty_dirs(full_path.parent)
            self.log.debug("Deleted {path}", path=path)

    def _prune_empty_dirs(self, directory: Path) -> None:
        root = self.root.resolve()
        current = directory.resolve()
        while current != root and root in current.parents:
            if any(current.iterdir()):
                break
            current.rmdir()
            current = current.parent

    def list_files(self) -> List[str]:
        """List every file in the working tree, skipping the repository directory."""
        files = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = Path(dirpath).relative_to(self.root)
            if rel_dir == Path("."):
                dirnames[:] = [d for d in dirnames if d != self.repo_dir_name]
            for filename in filenames:
                files.append(PurePosixPath(*rel_dir.parts, filename).as_posix())
        return sorted(files)
