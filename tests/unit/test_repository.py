"""
Unit tests for repository commands.

Tests init, add, commit, rm, log, find, status, checkout, branches and reset.
"""

from pathlib import Path

import pytest

from twig.config import Config, RepositoryConfig
from twig.errors import (
    BranchExistsError,
    BranchNotFoundError,
    CheckoutCurrentBranchError,
    CommitNotFoundError,
    EmptyMessageError,
    FileMissingError,
    FileNotInCommitError,
    NoMatchingCommitError,
    NotInitializedError,
    NothingToCommitError,
    RemoveCurrentBranchError,
    RepositoryExistsError,
    UntrackedFileInWayError,
)
from twig.objects import EPOCH
from twig.repository import Repository


def write(repo: Repository, path: str, text: str) -> None:
    repo.worktree.write_file(path, text.encode("utf-8"))


def read(repo: Repository, path: str) -> str:
    return repo.worktree.read_file(path).decode("utf-8")


def commit_file(repo: Repository, path: str, text: str, message: str):
    write(repo, path, text)
    repo.add(path)
    return repo.commit(message)


class TestInit:
    """Tests for repository creation."""

    def test_init_creates_root_commit(self, repo: Repository) -> None:
        """Test the root commit, branch and HEAD created by init."""
        root = repo.head_commit()

        assert root.message == "initial commit"
        assert root.timestamp == EPOCH
        assert root.parents == []
        assert root.tree == {}
        assert repo.current_branch() == "master"
        assert repo.refs.list_branches() == ["master"]

    def test_init_twice(self, repo: Repository) -> None:
        """Test that init refuses an existing repository."""
        with pytest.raises(RepositoryExistsError):
            repo.init()

    def test_requires_init(self, tmp_path: Path) -> None:
        """Test that commands fail outside a repository."""
        repository = Repository(tmp_path, config=Config())
        with pytest.raises(NotInitializedError):
            repository.status()
        with pytest.raises(NotInitializedError):
            repository.log()

    def test_configured_names(self, tmp_path: Path) -> None:
        """Test custom repository directory and default branch."""
        settings = Config(
            repository=RepositoryConfig(repo_dir_name=".vc", default_branch="main")
        )
        repository = Repository(tmp_path, config=settings)
        repository.init()

        assert (tmp_path / ".vc" / "HEAD").read_text() == "main"
        assert repository.current_branch() == "main"


class TestAddCommit:
    """Tests for add and commit."""

    def test_commit(self, repo: Repository) -> None:
        """Test committing a staged file."""
        root = repo.head_commit()
        commit = commit_file(repo, "a.txt", "hello", "Add a")

        assert commit.parents == [root.commit_id]
        assert commit.tracks("a.txt")
        assert repo.head_commit() == commit
        assert repo.staging.is_empty()

    def test_add_missing_file(self, repo: Repository) -> None:
        """Test adding a file that does not exist."""
        with pytest.raises(FileMissingError) as exc_info:
            repo.add("ghost.txt")
        assert exc_info.value.message == "File does not exist."

    def test_empty_commit_rejected(self, repo: Repository) -> None:
        """Test that nothing staged creates no commit object."""
        before = repo.store.list_ids()

        with pytest.raises(NothingToCommitError) as exc_info:
            repo.commit("nothing")

        assert exc_info.value.message == "No changes added to the commit."
        assert repo.store.list_ids() == before

    def test_blank_message_rejected(self, repo: Repository) -> None:
        """Test that a blank message is rejected before anything else."""
        write(repo, "a.txt", "x")
        repo.add("a.txt")
        with pytest.raises(EmptyMessageError) as exc_info:
            repo.commit("   ")
        assert exc_info.value.message == "Please enter a commit message."

    def test_readd_unchanged(self, repo: Repository) -> None:
        """Test that adding a committed, unchanged file stages nothing."""
        commit_file(repo, "a.txt", "hello", "Add a")
        repo.add("a.txt")
        repo.add("a.txt")
        assert repo.staging.is_empty()

    def test_rm_then_commit(self, repo: Repository) -> None:
        """Test that a removal is reflected in the next commit."""
        commit_file(repo, "a.txt", "hello", "Add a")
        repo.rm("a.txt")
        commit = repo.commit("Remove a")

        assert not commit.tracks("a.txt")
        assert not repo.worktree.exists("a.txt")

    def test_nested_paths(self, repo: Repository) -> None:
        """Test that files in subdirectories are tracked by relative path."""
        commit = commit_file(repo, "docs/readme.md", "# hi", "Add docs")
        assert commit.tracks("docs/readme.md")


class TestHistory:
    """Tests for log, global-log and find."""

    def test_log_newest_first(self, repo: Repository) -> None:
        """Test that log walks back from HEAD to the root."""
        commit_file(repo, "a.txt", "1", "first")
        commit_file(repo, "a.txt", "2", "second")

        assert [c.message for c in repo.log()] == [
            "second",
            "first",
            "initial commit",
        ]

    def test_global_log_includes_other_branches(self, repo: Repository) -> None:
        """Test that global-log lists commits not reachable from HEAD."""
        repo.branch("other")
        repo.checkout_branch("other")
        commit_file(repo, "a.txt", "1", "on other")
        repo.checkout_branch("master")

        messages = {c.message for c in repo.global_log()}
        assert "on other" in messages
        assert "on other" not in {c.message for c in repo.log()}

    def test_find(self, repo: Repository) -> None:
        """Test finding commits by exact message."""
        first = commit_file(repo, "a.txt", "1", "same message")
        second = commit_file(repo, "a.txt", "2", "same message")

        assert sorted(repo.find("same message")) == sorted(
            [first.commit_id, second.commit_id]
        )

    def test_find_no_match(self, repo: Repository) -> None:
        """Test that find reports when nothing matches."""
        with pytest.raises(NoMatchingCommitError) as exc_info:
            repo.find("never written")
        assert exc_info.value.message == "Found no commit with that message."


class TestStatus:
    """Tests for status."""

    def test_clean(self, repo: Repository) -> None:
        """Test status of a fresh repository."""
        report = repo.status()

        assert report.staged == []
        assert report.untracked == []
        assert report.format() == (
            "=== Branches ===\n"
            "*master\n"
            "\n"
            "=== Staged Files ===\n"
            "\n"
            "=== Removed Files ===\n"
            "\n"
            "=== Modifications Not Staged For Commit ===\n"
            "\n"
            "=== Untracked Files ===\n"
        )

    def test_all_sections(self, repo: Repository) -> None:
        """Test every kind of entry in one report."""
        commit_file(repo, "tracked.txt", "v1", "base")
        commit_file(repo, "removed.txt", "r", "more")
        commit_file(repo, "deleted.txt", "d", "more")
        repo.branch("other")

        write(repo, "staged.txt", "s")
        repo.add("staged.txt")
        repo.rm("removed.txt")
        write(repo, "tracked.txt", "v2")
        repo.worktree.delete_file("deleted.txt")
        write(repo, "loose.txt", "?")

        report = repo.status()

        assert report.branches == ["master", "other"]
        assert report.staged == ["staged.txt"]
        assert report.removed == ["removed.txt"]
        assert report.modified_not_staged == [
            ("deleted.txt", "deleted"),
            ("tracked.txt", "modified"),
        ]
        assert report.untracked == ["loose.txt"]
        assert "tracked.txt (modified)" in report.format()

    def test_staged_then_changed(self, repo: Repository) -> None:
        """Test staged files edited or deleted afterwards."""
        write(repo, "a.txt", "one")
        repo.add("a.txt")
        write(repo, "a.txt", "two")
        write(repo, "b.txt", "b")
        repo.add("b.txt")
        repo.worktree.delete_file("b.txt")

        assert repo.status().modified_not_staged == [
            ("a.txt", "modified"),
            ("b.txt", "deleted"),
        ]

    def test_removed_then_recreated(self, repo: Repository) -> None:
        """Test that a file staged for removal and recreated is untracked."""
        commit_file(repo, "a.txt", "x", "base")
        repo.rm("a.txt")
        write(repo, "a.txt", "x again")

        report = repo.status()
        assert report.removed == ["a.txt"]
        assert report.untracked == ["a.txt"]


class TestCheckout:
    """Tests for file and branch checkout."""

    def test_checkout_file_from_head(self, repo: Repository) -> None:
        """Test restoring a file from HEAD without staging it."""
        commit_file(repo, "a.txt", "committed", "base")
        write(repo, "a.txt", "scribbles")

        repo.checkout_file("a.txt")

        assert read(repo, "a.txt") == "committed"
        assert repo.staging.is_empty()

    def test_checkout_file_at_prefix(self, repo: Repository) -> None:
        """Test restoring a file from an abbreviated commit id."""
        first = commit_file(repo, "a.txt", "v1", "v1")
        commit_file(repo, "a.txt", "v2", "v2")

        repo.checkout_file_at(first.commit_id[:8], "a.txt")

        assert read(repo, "a.txt") == "v1"

    def test_checkout_file_errors(self, repo: Repository) -> None:
        """Test missing commits and untracked files."""
        commit_file(repo, "a.txt", "v1", "v1")
        with pytest.raises(CommitNotFoundError) as exc_info:
            repo.checkout_file_at("0" * 40, "a.txt")
        assert exc_info.value.message == "No commit with that id exists."
        with pytest.raises(FileNotInCommitError) as exc_info:
            repo.checkout_file("b.txt")
        assert exc_info.value.message == "File does not exist in that commit."

    def test_round_trip(self, repo: Repository) -> None:
        """Test that checking out a commit reproduces its files byte for byte."""
        files = {"a.txt": "alpha\n", "dir/b.bin": "\x00\x01binary", "c.txt": ""}
        for path, text in files.items():
            write(repo, path, text)
            repo.add(path)
        snapshot = repo.commit("snapshot")
        commit_file(repo, "a.txt", "changed", "later")
        repo.rm("c.txt")
        repo.commit("drop c")

        repo.reset(snapshot.commit_id)

        for path, text in files.items():
            assert read(repo, path) == text

    def test_checkout_branch(self, repo: Repository) -> None:
        """Test switching branches updates files, stage and HEAD."""
        commit_file(repo, "shared.txt", "base", "base")
        repo.branch("other")
        commit_file(repo, "master_only.txt", "m", "master work")

        repo.checkout_branch("other")

        assert repo.current_branch() == "other"
        assert not repo.worktree.exists("master_only.txt")
        assert read(repo, "shared.txt") == "base"

    def test_checkout_branch_errors(self, repo: Repository) -> None:
        """Test the checkout failure messages."""
        with pytest.raises(BranchNotFoundError) as exc_info:
            repo.checkout_branch("ghost")
        assert exc_info.value.message == "No such branch exists."
        with pytest.raises(CheckoutCurrentBranchError) as exc_info:
            repo.checkout_branch("master")
        assert exc_info.value.message == "No need to checkout the current branch."

    def test_untracked_in_way_leaves_tree(self, repo: Repository) -> None:
        """Test that checkout refuses to clobber untracked files."""
        repo.branch("other")
        repo.checkout_branch("other")
        commit_file(repo, "new.txt", "from other", "other work")
        repo.checkout_branch("master")
        write(repo, "new.txt", "mine")

        with pytest.raises(UntrackedFileInWayError):
            repo.checkout_branch("other")

        assert read(repo, "new.txt") == "mine"
        assert repo.current_branch() == "master"


class TestBranches:
    """Tests for branch, rm-branch and reset."""

    def test_branch_points_at_head(self, repo: Repository) -> None:
        """Test that a new branch starts at HEAD without switching."""
        commit = commit_file(repo, "a.txt", "1", "first")
        repo.branch("feature")

        assert repo.refs.load_branch("feature") == commit.commit_id
        assert repo.current_branch() == "master"

    def test_branch_exists(self, repo: Repository) -> None:
        """Test creating a duplicate branch."""
        repo.branch("feature")
        with pytest.raises(BranchExistsError) as exc_info:
            repo.branch("feature")
        assert exc_info.value.message == "A branch with that name already exists."

    def test_rm_branch(self, repo: Repository) -> None:
        """Test that removing a branch keeps its commits."""
        repo.branch("feature")
        repo.checkout_branch("feature")
        commit = commit_file(repo, "a.txt", "1", "feature work")
        repo.checkout_branch("master")

        repo.rm_branch("feature")

        assert not repo.refs.has_branch("feature")
        assert repo.store.exists(commit.commit_id)

    def test_rm_branch_errors(self, repo: Repository) -> None:
        """Test rm-branch failure messages."""
        with pytest.raises(RemoveCurrentBranchError) as exc_info:
            repo.rm_branch("master")
        assert exc_info.value.message == "Cannot remove the current branch."
        with pytest.raises(BranchNotFoundError) as exc_info:
            repo.rm_branch("ghost")
        assert exc_info.value.message == "A branch with that name does not exist."

    def test_reset(self, repo: Repository) -> None:
        """Test that reset moves the branch and clears the stage."""
        first = commit_file(repo, "a.txt", "1", "first")
        commit_file(repo, "b.txt", "2", "second")
        write(repo, "c.txt", "staged")
        repo.add("c.txt")

        repo.reset(first.commit_id[:10])

        assert repo.refs.load_branch("master") == first.commit_id
        assert not repo.worktree.exists("b.txt")
        assert repo.staging.is_empty()

    def test_reset_unknown(self, repo: Repository) -> None:
        """Test resetting to an unknown commit."""
        with pytest.raises(CommitNotFoundError):
            repo.reset("deadbeef")
