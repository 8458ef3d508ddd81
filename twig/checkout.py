"""
Working-tree synchronization.

Moves the files on disk from the currently checked-out commit to a target
commit. All safety checks run before the first file is touched.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, List

from .errors import UntrackedFileInWayError
from .logging import get_twig_logger
from .objects import Commit
from .storage import ObjectStore
from .worktree import WorkingTree


@dataclass
class CheckoutPlan:
    """Disjoint path sets for moving from ``current`` to ``target``."""

    to_delete: List[str]
    to_overwrite: List[str]
    to_write: List[str]

    @classmethod
    def between(cls, current: Commit, target: Commit) -> "CheckoutPlan":
        current_paths = set(current.tree)
        target_paths = set(target.tree)
        return cls(
            to_delete=sorted(current_paths - target_paths),
            to_overwrite=sorted(current_paths & target_paths),
            to_write=sorted(target_paths - current_paths),
        )


def find_untracked_in_way(
    worktree: WorkingTree,
    current: Commit,
    paths: List[str],
    deleted: Iterable[str] = (),
) -> List[str]:
    """
    Files on disk that would block writing ``paths``.

    Besides an untracked file at the same path, a write is blocked when a
    directory of that name still holds files, or when a parent directory
    would have to replace a file. Files in ``deleted`` are removed before
    any write and never block.
    """
    doomed = set(deleted)
    surviving = [p for p in worktree.list_files() if p not in doomed]
    surviving_set = set(surviving)

    in_way = set()
    for path in paths:
        if path in surviving_set and not current.tracks(path):
            in_way.add(path)
        prefix = path + "/"
        in_way.update(p for p in surviving if p.startswith(prefix))
        for parent in PurePosixPath(path).parents:
            if parent.as_posix() in surviving_set:
                in_way.add(parent.as_posix())
    return sorted(in_way)


class WorkingTreeSynchronizer:
    """Reconciles the working tree with a target commit's tree."""

    def __init__(self, store: ObjectStore, worktree: WorkingTree):
        self.store = store
        self.worktree = worktree
        self.log = get_twig_logger("worktree")

    def check_untracked(
        self, current: Commit, paths: List[str], deleted: Iterable[str] = ()
    ) -> None:
        """
        Refuse to clobber untracked files.

        Raises:
            UntrackedFileInWayError: Some file on disk is not tracked by
                ``current`` and would block writing ``paths``
        """
        in_way = find_untracked_in_way(self.worktree, current, paths, deleted)
        if in_way:
            raise UntrackedFileInWayError(in_way)

    def write_blob(self, path: str, blob_id: str) -> None:
        self.worktree.write_file(path, self.store.get_blob(blob_id).content)

    def checkout_commit(self, current: Commit, target: Commit) -> CheckoutPlan:
        """
        Replace the files of ``current`` with those of ``target``.

        Files only in ``current`` are deleted, files in both are overwritten
        and files only in ``target`` are written. Nothing is modified when an
        untracked file is in the way. Staging and refs are the caller's job.
        """
        plan = CheckoutPlan.between(current, target)
        self.check_untracked(current, plan.to_write, deleted=plan.to_delete)

        # Load every blob first so a missing object fails before any write
        contents = {
            path: self.store.get_blob(target.tree[path]).content
            for path in plan.to_overwrite + plan.to_write
        }

        for path in plan.to_delete:
            self.worktree.delete_file(path)
        for path in plan.to_overwrite + plan.to_write:
            self.worktree.write_file(path, contents[path])

        self.log.debug(
            "Checked out {commit}: {deleted} deleted, {overwritten} overwritten, "
            "{written} written",
            commit=target.commit_id[:7],
            deleted=len(plan.to_delete),
            overwritten=len(plan.to_overwrite),
            written=len(plan.to_write),
        )
        return plan
