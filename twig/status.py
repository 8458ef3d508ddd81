"""
Status report for the working tree, staging area and branches.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .objects import Blob, Commit
from .staging import StagingArea
from .worktree import WorkingTree


@dataclass
class StatusReport:
    """
    Snapshot of everything ``status`` displays.

    ``modified_not_staged`` holds ``(path, "modified" | "deleted")`` pairs.
    """

    current_branch: str
    branches: List[str]
    staged: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    modified_not_staged: List[Tuple[str, str]] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format the report as five titled sections separated by blank lines."""
        sections = [
            (
                "Branches",
                [
                    f"*{branch}" if branch == self.current_branch else branch
                    for branch in self.branches
                ],
            ),
            ("Staged Files", self.staged),
            ("Removed Files", self.removed),
            (
                "Modifications Not Staged For Commit",
                [f"{path} ({kind})" for path, kind in self.modified_not_staged],
            ),
            ("Untracked Files", self.untracked),
        ]
        lines = []
        for title, entries in sections:
            lines.append(f"=== {title} ===")
            lines.extend(entries)
            lines.append("")
        return "\n".join(lines)


def _working_blob_id(worktree: WorkingTree, path: str) -> Optional[str]:
    if not worktree.exists(path):
        return None
    return Blob.from_content(path, worktree.read_file(path)).blob_id


def compute_status(
    current_branch: str,
    branches: List[str],
    head: Commit,
    staging: StagingArea,
    worktree: WorkingTree,
) -> StatusReport:
    """
    Compare HEAD, the staging area and the working tree.

    A file is modified but not staged when it is tracked and changed on disk
    but not staged, staged with content that differs from disk, staged but
    deleted from disk, or tracked, not staged for removal and deleted from
    disk. A file is untracked when it exists on disk but is neither staged
    for addition nor tracked; that includes files staged for removal and
    then recreated.
    """
    additions = staging.additions
    removals = staging.removals
    working_files = worktree.list_files()
    working_ids: Dict[str, Optional[str]] = {
        path: _working_blob_id(worktree, path) for path in working_files
    }

    modified: Dict[str, str] = {}
    for path, blob_id in head.tree.items():
        on_disk = working_ids.get(path)
        if path in additions or path in removals:
            continue
        if on_disk is None:
            modified[path] = "deleted"
        elif on_disk != blob_id:
            modified[path] = "modified"
    for path in additions.paths():
        on_disk = working_ids.get(path)
        if on_disk is None:
            modified[path] = "deleted"
        elif on_disk != additions.get(path):
            modified[path] = "modified"

    untracked = [
        path
        for path in working_files
        if path not in additions and (not head.tracks(path) or path in removals)
    ]

    return StatusReport(
        current_branch=current_branch,
        branches=branches,
        staged=additions.paths(),
        removed=removals.paths(),
        modified_not_staged=sorted(modified.items()),
        untracked=untracked,
    )
