"""
Staging area: pending additions and removals not yet committed.

Two stages are persisted between invocations, ``add_stage`` and
``remove_stage``, each a mapping from path to blob id.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import NothingToRemoveError
from .logging import get_twig_logger
from .objects import Blob, Commit
from .storage import ObjectStore
from .worktree import WorkingTree


@dataclass
class Stage:
    """Mapping from working-tree path to the blob id staged for it."""

    entries: Dict[str, str] = field(default_factory=dict)

    def put(self, path: str, blob_id: str) -> None:
        self.entries[path] = blob_id

    def discard(self, path: str) -> bool:
        """Drop ``path`` if present; report whether anything was removed."""
        return self.entries.pop(path, None) is not None

    def get(self, path: str) -> Optional[str]:
        return self.entries.get(path)

    def paths(self) -> List[str]:
        return sorted(self.entries)

    def clear(self) -> None:
        self.entries.clear()

    def is_empty(self) -> bool:
        return not self.entries

    def __contains__(self, path: object) -> bool:
        return path in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def to_json(self) -> str:
        return json.dumps(self.entries, indent=2, sort_keys=True)

    @classmethod
    def from_json(cls, json_str: str) -> "Stage":
        return cls(entries=dict(json.loads(json_str)))

    def save(self, stage_file: Path) -> None:
        stage_file.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, stage_file: Path) -> "Stage":
        """Read a stage from disk; a missing file is an empty stage."""
        if not stage_file.is_file():
            return cls()
        return cls.from_json(stage_file.read_text(encoding="utf-8"))


class StagingArea:
    """
    Reconciles ``add`` and ``rm`` requests against HEAD.

    Mutations are written back to disk immediately.
    """

    def __init__(
        self,
        store: ObjectStore,
        worktree: WorkingTree,
        add_stage_file: Path,
        remove_stage_file: Path,
    ):
        self.store = store
        self.worktree = worktree
        self.add_stage_file = add_stage_file
        self.remove_stage_file = remove_stage_file
        self.additions = Stage.load(add_stage_file)
        self.removals = Stage.load(remove_stage_file)
        self.log = get_twig_logger("staging")

    def save(self) -> None:
        self.additions.save(self.add_stage_file)
        self.removals.save(self.remove_stage_file)

    def stage_add(self, blob: Blob, head: Commit) -> None:
        """
        Stage a snapshot of a file for addition.

        Content identical to HEAD is never staged: any pending removal of the
        path is cancelled and any older staged version is dropped. Otherwise
        the blob is stored and replaces whatever was staged for the path.
        """
        if head.tree.get(blob.path) == blob.blob_id:
            cancelled = self.removals.discard(blob.path)
            self.additions.discard(blob.path)
            self.log.debug(
                "{path} matches HEAD (removal cancelled: {cancelled})",
                path=blob.path,
                cancelled=cancelled,
            )
        else:
            self.store.put(blob)
            self.additions.put(blob.path, blob.blob_id)
            self.removals.discard(blob.path)
            self.log.debug(
                "Staged {path} as {blob_id}", path=blob.path, blob_id=blob.blob_id
            )
        self.save()

    def stage_remove(self, path: str, head: Commit) -> None:
        """
        Unstage a pending addition, or stage a tracked file for removal.

        A path staged for addition is only unstaged; the working file is left
        alone. A path tracked by HEAD is recorded for removal and deleted from
        the working tree.

        Raises:
            NothingToRemoveError: The path is neither staged nor tracked
        """
        if path in self.additions:
            self.additions.discard(path)
            self.log.debug("Unstaged {path}", path=path)
        elif head.tracks(path):
            self.removals.put(path, head.tree[path])
            self.worktree.delete_file(path)
            self.log.debug("Staged {path} for removal", path=path)
        else:
            raise NothingToRemoveError(path)
        self.save()

    def apply_to(self, tree: Dict[str, str]) -> Dict[str, str]:
        """Return a copy of ``tree`` with every staged change applied."""
        result = dict(tree)
        result.update(self.additions.entries)
        for path in self.removals.entries:
            result.pop(path, None)
        return result

    def clear(self) -> None:
        self.additions.clear()
        self.removals.clear()
        self.save()
        self.log.debug("Staging area cleared")

    def is_empty(self) -> bool:
        return self.additions.is_empty() and self.removals.is_empty()
