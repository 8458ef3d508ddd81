"""
Repository: the state handle every twig command runs against.

Bundles the object store, references, staging area and working tree of one
working directory. Each public method is one user-facing command; failures
are raised as ``TwigError`` subclasses before any state is mutated.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .checkout import WorkingTreeSynchronizer
from .config import Config, config as default_config
from .errors import (
    BranchExistsError,
    BranchNotFoundError,
    CheckoutCurrentBranchError,
    EmptyMessageError,
    FileMissingError,
    FileNotInCommitError,
    NoMatchingCommitError,
    NotInitializedError,
    NothingToCommitError,
    RemoveCurrentBranchError,
    RepositoryExistsError,
)
from .graph import CommitGraph
from .logging import get_twig_logger, track_operation
from .merge import MergeEngine, MergeResult
from .objects import EPOCH, Blob, Commit
from .staging import StagingArea
from .status import StatusReport, compute_status
from .storage import ObjectStore, RefStore, RepositoryLayout
from .worktree import WorkingTree


def local_now() -> datetime:
    """Current wall-clock time with the local UTC offset attached."""
    return datetime.now().astimezone()


class Repository:
    """
    A twig repository rooted at a working directory.

    Example:
        >>> repo = Repository(Path("."))
        >>> repo.init()
        >>> repo.add("notes.txt")
        >>> repo.commit("Add notes")
    """

    def __init__(
        self,
        work_dir: Path,
        config: Optional[Config] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        """
        Initialize the repository handle. Nothing is read or written yet.

        Args:
            work_dir: Working directory holding the repository directory
            config: Configuration (default: module-level configuration)
            clock: Source of commit timestamps
        """
        self.config = config or default_config
        self.work_dir = Path(work_dir)
        self.clock = clock
        repo_settings = self.config.repository
        self.layout = RepositoryLayout(self.work_dir / repo_settings.repo_dir_name)
        self.store = ObjectStore(self.layout.objects_dir)
        self.refs = RefStore(self.layout)
        self.graph = CommitGraph(self.store)
        self.worktree = WorkingTree(self.work_dir, repo_settings.repo_dir_name)
        self.synchronizer = WorkingTreeSynchronizer(self.store, self.worktree)
        self._staging: Optional[StagingArea] = None
        self.logger = get_twig_logger("repository")

    # State access

    def is_initialized(self) -> bool:
        return self.layout.exists()

    def _require_init(self) -> None:
        if not self.is_initialized():
            raise NotInitializedError()

    @property
    def staging(self) -> StagingArea:
        """Staging area, loaded from disk on first use."""
        if self._staging is None:
            self._require_init()
            self._staging = StagingArea(
                self.store,
                self.worktree,
                self.layout.add_stage_file,
                self.layout.remove_stage_file,
            )
        return self._staging

    def current_branch(self) -> str:
        self._require_init()
        return self.refs.get_head()

    def head_commit(self) -> Commit:
        self._require_init()
        return self.graph.get(self.refs.current_commit_id())

    # Commands

    @track_operation("init")
    def init(self) -> Commit:
        """
        Create the repository with a root commit on the default branch.

        Raises:
            RepositoryExistsError: The repository directory already exists
        """
        if self.is_initialized():
            raise RepositoryExistsError()

        settings = self.config.repository
        self.layout.create()
        root = Commit.create(
            message=settings.initial_commit_message,
            tree={},
            parents=[],
            timestamp=EPOCH,
        )
        self.store.put(root)
        self.refs.save_branch(settings.default_branch, root.commit_id)
        self.refs.set_head(settings.default_branch)
        self.staging.clear()

        self.logger.info(
            "Initialized repository in {path}", path=str(self.layout.repo_dir)
        )
        return root

    @track_operation("add")
    def add(self, path: str) -> Blob:
        """
        Snapshot a working file into the staging area.

        Raises:
            FileMissingError: The file is not in the working tree
        """
        self._require_init()
        rel_path = self.worktree.normalize(path)
        if not self.worktree.exists(rel_path):
            raise FileMissingError(rel_path)

        blob = Blob.from_content(rel_path, self.worktree.read_file(rel_path))
        self.staging.stage_add(blob, self.head_commit())
        return blob

    @track_operation("commit")
    def commit(self, message: str) -> Commit:
        """
        Record the staged changes as a new commit on the current branch.

        Raises:
            EmptyMessageError: ``message`` is blank
            NothingToCommitError: Both stages are empty
        """
        self._require_init()
        if not message.strip():
            raise EmptyMessageError()
        if self.staging.is_empty():
            raise NothingToCommitError()

        head = self.head_commit()
        commit = Commit.create(
            message=message,
            tree=self.staging.apply_to(head.tree),
            parents=[head.commit_id],
            timestamp=self.clock(),
        )
        self.store.put(commit)
        self.staging.clear()
        self.refs.save_branch(self.refs.get_head(), commit.commit_id)
        return commit

    @track_operation("rm")
    def rm(self, path: str) -> None:
        """
        Unstage a file, or stage a tracked file for removal and delete it.

        Raises:
            NothingToRemoveError: The file is neither staged nor tracked
        """
        self._require_init()
        rel_path = self.worktree.normalize(path)
        self.staging.stage_remove(rel_path, self.head_commit())

    def log(self) -> List[Commit]:
        """First-parent history from HEAD back to the root commit."""
        return list(self.graph.history(self.head_commit()))

    def global_log(self) -> List[Commit]:
        """Every commit ever made, in no particular order."""
        self._require_init()
        return self.graph.all_commits()

    @track_operation("find")
    def find(self, message: str) -> List[str]:
        """
        Ids of every commit whose message is exactly ``message``.

        Raises:
            NoMatchingCommitError: No commit has that message
        """
        self._require_init()
        ids = [
            commit.commit_id
            for commit in self.graph.all_commits()
            if commit.message == message
        ]
        if not ids:
            raise NoMatchingCommitError(message)
        return ids

    def status(self) -> StatusReport:
        return compute_status(
            current_branch=self.current_branch(),
            branches=self.refs.list_branches(),
            head=self.head_commit(),
            staging=self.staging,
            worktree=self.worktree,
        )

    @track_operation("checkout_file")
    def checkout_file(self, path: str, commit_id: Optional[str] = None) -> None:
        """
        Restore one file from HEAD, or from ``commit_id`` when given.

        The restored file is not staged.

        Raises:
            CommitNotFoundError: ``commit_id`` does not resolve to a commit
            FileNotInCommitError: The commit does not track the file
        """
        self._require_init()
        commit = self.graph.resolve(commit_id) if commit_id else self.head_commit()
        rel_path = self.worktree.normalize(path)
        if not commit.tracks(rel_path):
            raise FileNotInCommitError(rel_path, commit.commit_id)
        self.synchronizer.write_blob(rel_path, commit.tree[rel_path])

    def checkout_file_at(self, commit_id: str, path: str) -> None:
        """Restore one file as it was in ``commit_id`` (a prefix is allowed)."""
        self.checkout_file(path, commit_id=commit_id)

    @track_operation("checkout_branch")
    def checkout_branch(self, branch_name: str) -> None:
        """
        Switch the working tree and HEAD to another branch.

        Raises:
            BranchNotFoundError: No such branch
            CheckoutCurrentBranchError: The branch is already checked out
            UntrackedFileInWayError: An untracked file would be overwritten
        """
        self._require_init()
        target_id = self.refs.load_branch(branch_name)
        if target_id is None:
            raise BranchNotFoundError(branch_name, "No such branch exists.")
        if branch_name == self.refs.get_head():
            raise CheckoutCurrentBranchError()

        self.synchronizer.checkout_commit(self.head_commit(), self.graph.get(target_id))
        self.staging.clear()
        self.refs.set_head(branch_name)

    @track_operation("branch")
    def branch(self, branch_name: str) -> None:
        """
        Create a branch at the current commit without switching to it.

        Raises:
            BranchExistsError: A branch with that name already exists
        """
        self._require_init()
        if self.refs.has_branch(branch_name):
            raise BranchExistsError(branch_name)
        self.refs.save_branch(branch_name, self.refs.current_commit_id())

    @track_operation("rm_branch")
    def rm_branch(self, branch_name: str) -> None:
        """
        Delete a branch pointer. Its commits are kept.

        Raises:
            RemoveCurrentBranchError: The branch is checked out
            BranchNotFoundError: No such branch
        """
        self._require_init()
        if branch_name == self.refs.get_head():
            raise RemoveCurrentBranchError()
        if not self.refs.delete_branch(branch_name):
            raise BranchNotFoundError(branch_name)

    @track_operation("reset")
    def reset(self, commit_id: str) -> Commit:
        """
        Check out an arbitrary commit and move the current branch to it.

        Raises:
            CommitNotFoundError: ``commit_id`` does not resolve to a commit
            UntrackedFileInWayError: An untracked file would be overwritten
        """
        self._require_init()
        target = self.graph.resolve(commit_id)
        self.synchronizer.checkout_commit(self.head_commit(), target)
        self.staging.clear()
        self.refs.save_branch(self.refs.get_head(), target.commit_id)
        return target

    @track_operation("merge")
    def merge(self, branch_name: str) -> MergeResult:
        """
        Merge another branch into the current one.

        See ``MergeEngine.merge`` for the failure cases.
        """
        self._require_init()
        engine = MergeEngine(
            self.store, self.refs, self.graph, self.staging, self.worktree, self.clock
        )
        return engine.merge(branch_name)
