"""
Storage backend for twig repositories.

Handles persistence of objects, branch references and HEAD to disk.
"""

import json
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import CorruptObjectError, ObjectNotFoundError
from .logging import get_twig_logger
from .objects import Blob, Commit

StoredObject = Union[Blob, Commit]


class RepositoryLayout:
    """
    Paths of every persisted structure inside the repository directory::

        .twig/
          objects/
            {object_id}        (one JSON document per blob or commit)
          refs/
            heads/
              {branch_name}    (contains commit_id)
          HEAD                 (contains the current branch name)
          add_stage
          remove_stage
    """

    def __init__(self, repo_dir: Path):
        self.repo_dir = repo_dir
        self.objects_dir = repo_dir / "objects"
        self.refs_dir = repo_dir / "refs"
        self.heads_dir = self.refs_dir / "heads"
        self.head_file = repo_dir / "HEAD"
        self.add_stage_file = repo_dir / "add_stage"
        self.remove_stage_file = repo_dir / "remove_stage"

    def exists(self) -> bool:
        return self.repo_dir.is_dir()

    def create(self) -> None:
        """Create the directory skeleton."""
        self.objects_dir.mkdir(parents=True, exist_ok=True)
        self.heads_dir.mkdir(parents=True, exist_ok=True)


class ObjectStore:
    """
    Content-addressed, write-once storage for blobs and commits.

    Objects are named by their id; putting an object that is already stored
    is a no-op.
    """

    def __init__(self, objects_dir: Path):
        self.objects_dir = objects_dir
        self.log = get_twig_logger("object_store")

    def _object_file(self, object_id: str) -> Path:
        return self.objects_dir / object_id

    def put(self, obj: StoredObject) -> str:
        """
        Persist an object under its id unless already present.

        Args:
            obj: Blob or commit to store

        Returns:
            The object's id
        """
        object_id = obj.blob_id if isinstance(obj, Blob) else obj.commit_id
        object_file = self._object_file(object_id)
        if object_file.exists():
            return object_id

        object_file.write_text(obj.to_json(), encoding="utf-8")
        self.log.debug(
            "Stored {kind} {object_id}",
            kind=type(obj).__name__.lower(),
            object_id=object_id,
        )
        return object_id

    def exists(self, object_id: str) -> bool:
        return self._object_file(object_id).is_file()

    def get(self, object_id: str) -> StoredObject:
        """
        Load an object by its full id.

        Raises:
            ObjectNotFoundError: If nothing is stored under ``object_id``
            CorruptObjectError: If the stored document cannot be decoded
        """
        object_file = self._object_file(object_id)
        if not object_file.is_file():
            raise ObjectNotFoundError(object_id)

        try:
            data = json.loads(object_file.read_text(encoding="utf-8"))
            kind = data.get("type")
            if kind == "blob":
                return Blob.from_dict(data)
            if kind == "commit":
                return Commit.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CorruptObjectError(object_id, str(e)) from e

        raise CorruptObjectError(object_id, f"unknown object type {kind!r}")

    def get_blob(self, blob_id: str) -> Blob:
        obj = self.get(blob_id)
        if not isinstance(obj, Blob):
            raise CorruptObjectError(blob_id, "expected a blob")
        return obj

    def get_commit(self, commit_id: str) -> Commit:
        obj = self.get(commit_id)
        if not isinstance(obj, Commit):
            raise CorruptObjectError(commit_id, "expected a commit")
        return obj

    def list_ids(self) -> List[str]:
        """List the ids of every stored object, sorted."""
        return sorted(f.name for f in self.objects_dir.iterdir() if f.is_file())

    def iter_commits(self) -> Iterator[Commit]:
        """Yield every stored commit, skipping blobs."""
        for object_id in self.list_ids():
            obj = self.get(object_id)
            if isinstance(obj, Commit):
                yield obj


class RefStore:
    """
    Branch references and the HEAD pointer.

    HEAD always names a branch; detached HEAD is not supported.
    """

    def __init__(self, layout: RepositoryLayout):
        self.heads_dir = layout.heads_dir
        self.head_file = layout.head_file
        self.log = get_twig_logger("refs")

    def save_branch(self, branch_name: str, commit_id: str) -> None:
        """
        Point a branch at a commit, creating the branch if needed.

        Args:
            branch_name: Name of the branch
            commit_id: Commit ID the branch points to
        """
        (self.heads_dir / branch_name).write_text(commit_id, encoding="utf-8")
        self.log.debug(
            "Branch {branch} -> {commit_id}", branch=branch_name, commit_id=commit_id
        )

    def load_branch(self, branch_name: str) -> Optional[str]:
        """
        Load a branch reference.

        Returns:
            Commit ID if branch exists, None otherwise
        """
        branch_file = self.heads_dir / branch_name
        if not branch_file.is_file():
            return None
        return branch_file.read_text(encoding="utf-8").strip()

    def has_branch(self, branch_name: str) -> bool:
        return (self.heads_dir / branch_name).is_file()

    def list_branches(self) -> List[str]:
        """List all branch names in lexicographic order."""
        return sorted(f.name for f in self.heads_dir.iterdir() if f.is_file())

    def delete_branch(self, branch_name: str) -> bool:
        """
        Delete a branch pointer; commits it referenced are untouched.

        Returns:
            True if deleted, False if didn't exist
        """
        branch_file = self.heads_dir / branch_name
        if branch_file.is_file():
            branch_file.unlink()
            self.log.debug("Deleted branch {branch}", branch=branch_name)
            return True
        return False

    def get_head(self) -> str:
        """Get the name of the active branch."""
        return self.head_file.read_text(encoding="utf-8").strip()

    def set_head(self, branch_name: str) -> None:
        self.head_file.write_text(branch_name, encoding="utf-8")
        self.log.debug("HEAD -> {branch}", branch=branch_name)

    def current_commit_id(self) -> str:
        """Get the commit id the active branch points to."""
        branch = self.get_head()
        commit_id = self.load_branch(branch)
        if commit_id is None:
            raise ObjectNotFoundError(f"refs/heads/{branch}")
        return commit_id
