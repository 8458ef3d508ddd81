"""
Three-way merge of two branches.

Every path tracked at the split point, the current tip or the target tip is
classified by comparing its blob ids across the three trees. Blob ids hash
path and content together, so for one path equal ids mean equal content.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from .checkout import WorkingTreeSynchronizer
from .errors import (
    AlreadyAncestorError,
    BranchNotFoundError,
    FastForwardOnlyError,
    SelfMergeError,
    UncommittedChangesError,
)
from .graph import CommitGraph
from .logging import get_twig_logger
from .objects import Blob, Commit
from .staging import StagingArea
from .storage import ObjectStore, RefStore
from .worktree import WorkingTree

CONFLICT_MESSAGE = "Encountered a merge conflict."


class MergeAction(str, Enum):
    """What a merge does to one path."""

    UNCHANGED = "unchanged"  # current and target agree
    KEEP_CURRENT = "keep_current"  # only current changed
    WRITE = "write"  # new in target
    OVERWRITE = "overwrite"  # changed only in target
    DELETE = "delete"  # removed only in target
    CONFLICT = "conflict"


def classify(
    split_id: Optional[str], current_id: Optional[str], target_id: Optional[str]
) -> MergeAction:
    """
    Classify one path from its blob id in each tree (None when absent).

    Examples:
        >>> classify("a", "a", "b")
        <MergeAction.OVERWRITE: 'overwrite'>
        >>> classify("a", "b", "c")
        <MergeAction.CONFLICT: 'conflict'>
    """
    if current_id == target_id:
        return MergeAction.UNCHANGED
    if split_id == current_id:
        if target_id is None:
            return MergeAction.DELETE
        if split_id is None:
            return MergeAction.WRITE
        return MergeAction.OVERWRITE
    if split_id == target_id:
        return MergeAction.KEEP_CURRENT
    return MergeAction.CONFLICT


@dataclass
class PathChange:
    """Classification of a single path."""

    path: str
    action: MergeAction
    split_id: Optional[str]
    current_id: Optional[str]
    target_id: Optional[str]

    def summary(self) -> str:
        """Get a one-line summary of this change."""
        markers = {
            MergeAction.WRITE: "A",
            MergeAction.OVERWRITE: "M",
            MergeAction.DELETE: "D",
            MergeAction.CONFLICT: "C",
        }
        return f"{markers.get(self.action, ' ')} {self.path}"


def classify_paths(split: Commit, current: Commit, target: Commit) -> List[PathChange]:
    """Classify every path tracked by any of the three commits, sorted by path."""
    all_paths = set(split.tree) | set(current.tree) | set(target.tree)
    changes = []
    for path in sorted(all_paths):
        split_id = split.tree.get(path)
        current_id = current.tree.get(path)
        target_id = target.tree.get(path)
        changes.append(
            PathChange(
                path=path,
                action=classify(split_id, current_id, target_id),
                split_id=split_id,
                current_id=current_id,
                target_id=target_id,
            )
        )
    return changes


def conflict_content(current: Optional[bytes], target: Optional[bytes]) -> bytes:
    """Build conflict-marked file content; an absent side contributes nothing."""
    return (
        b"<<<<<<< HEAD\n"
        + (current or b"")
        + b"=======\n"
        + (target or b"")
        + b">>>>>>>\n"
    )


@dataclass
class MergePlan:
    """Classified paths of a merge, grouped by action."""

    split: Commit
    current: Commit
    target: Commit
    changes: List[PathChange]

    @classmethod
    def build(cls, split: Commit, current: Commit, target: Commit) -> "MergePlan":
        return cls(split, current, target, classify_paths(split, current, target))

    def by_action(self, action: MergeAction) -> List[PathChange]:
        return [change for change in self.changes if change.action == action]

    @property
    def writes(self) -> List[PathChange]:
        return self.by_action(MergeAction.WRITE)

    @property
    def overwrites(self) -> List[PathChange]:
        return self.by_action(MergeAction.OVERWRITE)

    @property
    def deletes(self) -> List[PathChange]:
        return self.by_action(MergeAction.DELETE)

    @property
    def conflicts(self) -> List[PathChange]:
        return self.by_action(MergeAction.CONFLICT)

    def new_paths(self) -> List[str]:
        """Paths the merge creates that the current commit does not track."""
        return [
            change.path
            for change in self.writes + self.conflicts
            if change.current_id is None
        ]

    def merged_tree(self) -> Dict[str, str]:
        """Current tree with target writes and overwrites applied, deletes removed."""
        tree = dict(self.current.tree)
        for change in self.writes + self.overwrites:
            tree[change.path] = change.target_id  # type: ignore[assignment]
        for change in self.deletes:
            tree.pop(change.path, None)
        return tree


@dataclass
class MergeResult:
    """Outcome of a completed merge."""

    commit: Commit
    plan: MergePlan
    conflicted_paths: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicted_paths)

    @property
    def message(self) -> Optional[str]:
        return CONFLICT_MESSAGE if self.has_conflicts else None


class MergeEngine:
    """
    Merges another branch into the current one.

    Every precondition is checked before the working tree, the staging area
    or any ref is touched. The current branch moves only after all file
    writes have succeeded.
    """

    def __init__(
        self,
        store: ObjectStore,
        refs: RefStore,
        graph: CommitGraph,
        staging: StagingArea,
        worktree: WorkingTree,
        clock: Callable[[], datetime],
    ):
        self.store = store
        self.refs = refs
        self.graph = graph
        self.staging = staging
        self.worktree = worktree
        self.synchronizer = WorkingTreeSynchronizer(store, worktree)
        self.clock = clock
        self.log = get_twig_logger("merge")

    def _check_preconditions(self, target_branch: str) -> MergePlan:
        if not self.staging.is_empty():
            raise UncommittedChangesError()
        if not self.refs.has_branch(target_branch):
            raise BranchNotFoundError(target_branch)
        current_branch = self.refs.get_head()
        if target_branch == current_branch:
            raise SelfMergeError()

        current = self.graph.get(self.refs.current_commit_id())
        target_id = self.refs.load_branch(target_branch)
        target = self.graph.get(target_id)  # type: ignore[arg-type]
        split = self.graph.find_split_point(current, target)
        if split.commit_id == target.commit_id:
            raise AlreadyAncestorError()
        if split.commit_id == current.commit_id:
            raise FastForwardOnlyError()

        plan = MergePlan.build(split, current, target)
        self.synchronizer.check_untracked(
            current,
            plan.new_paths(),
            deleted=[change.path for change in plan.deletes],
        )
        return plan

    def _read(self, blob_id: Optional[str]) -> Optional[bytes]:
        if blob_id is None:
            return None
        return self.store.get_blob(blob_id).content

    def merge(self, target_branch: str) -> MergeResult:
        """
        Merge ``target_branch`` into the current branch.

        Conflicting paths get marker content which is written to the working
        tree and staged; the merge commit is created either way.

        Raises:
            UncommittedChangesError, BranchNotFoundError, SelfMergeError,
            AlreadyAncestorError, FastForwardOnlyError, UntrackedFileInWayError
        """
        plan = self._check_preconditions(target_branch)
        current_branch = self.refs.get_head()

        updates = {
            change.path: self._read(change.target_id)
            for change in plan.writes + plan.overwrites
        }
        conflict_blobs = [
            Blob.from_content(
                change.path,
                conflict_content(
                    self._read(change.current_id), self._read(change.target_id)
                ),
            )
            for change in plan.conflicts
        ]

        for change in plan.changes:
            if change.action in (MergeAction.KEEP_CURRENT, MergeAction.UNCHANGED):
                continue
            self.log.debug("{change}", change=change.summary())

        # Deletes before writes: a written path may be a directory the deletes empty
        for change in plan.deletes:
            self.worktree.delete_file(change.path)
        for path, content in updates.items():
            self.worktree.write_file(path, content)  # type: ignore[arg-type]
        for blob in conflict_blobs:
            self.worktree.write_file(blob.path, blob.content)
            self.staging.stage_add(blob, plan.current)

        tree = self.staging.apply_to(plan.merged_tree())
        commit = Commit.create(
            message=f"Merged {target_branch} into {current_branch}.",
            tree=tree,
            parents=[plan.current.commit_id, plan.target.commit_id],
            timestamp=self.clock(),
        )
        self.store.put(commit)
        self.staging.clear()
        self.refs.save_branch(current_branch, commit.commit_id)

        conflicted = [blob.path for blob in conflict_blobs]
        if conflicted:
            self.log.info(
                "Merge of {target} produced {count} conflicts",
                target=target_branch,
                count=len(conflicted),
            )
        return MergeResult(commit=commit, plan=plan, conflicted_paths=conflicted)
