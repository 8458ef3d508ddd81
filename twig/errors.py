"""
Custom exceptions for twig.

Every failure a command can report is an exception carrying the exact
user-facing message. The command layer decides how to print it and how to
exit; nothing below the CLI terminates the process.
"""

from __future__ import annotations


class TwigError(Exception):
    """Base exception for all twig errors."""

    default_message = "Unknown twig error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# User input errors


class UserInputError(TwigError):
    """Invalid operand supplied by the user."""

    pass


class FileMissingError(UserInputError):
    default_message = "File does not exist."

    def __init__(self, path: str, message: str | None = None):
        super().__init__(message)
        self.path = path


class EmptyMessageError(UserInputError):
    default_message = "Please enter a commit message."


class FileNotInCommitError(UserInputError):
    default_message = "File does not exist in that commit."

    def __init__(self, path: str, commit_id: str):
        super().__init__()
        self.path = path
        self.commit_id = commit_id


# State precondition violations


class PreconditionError(TwigError):
    """Repository state does not allow the requested operation."""

    pass


class RepositoryExistsError(PreconditionError):
    default_message = (
        "A Twig version-control system already exists in the current directory."
    )


class NotInitializedError(PreconditionError):
    default_message = "Not in an initialized Twig directory."


class NothingToCommitError(PreconditionError):
    default_message = "No changes added to the commit."


class NothingToRemoveError(PreconditionError):
    default_message = "No reason to remove the file."

    def __init__(self, path: str):
        super().__init__()
        self.path = path


class BranchExistsError(PreconditionError):
    default_message = "A branch with that name already exists."

    def __init__(self, branch: str):
        super().__init__()
        self.branch = branch


class BranchNotFoundError(PreconditionError):
    """Raised with a caller-specific message; checkout words it differently."""

    default_message = "A branch with that name does not exist."

    def __init__(self, branch: str, message: str | None = None):
        super().__init__(message)
        self.branch = branch


class CheckoutCurrentBranchError(PreconditionError):
    default_message = "No need to checkout the current branch."


class RemoveCurrentBranchError(PreconditionError):
    default_message = "Cannot remove the current branch."


class UncommittedChangesError(PreconditionError):
    default_message = "You have uncommitted changes."


class SelfMergeError(PreconditionError):
    default_message = "Cannot merge a branch with itself."


class AlreadyAncestorError(PreconditionError):
    default_message = "Given branch is an ancestor of the current branch."


class FastForwardOnlyError(PreconditionError):
    default_message = "Current branch fast-forwarded."


class UntrackedFileInWayError(PreconditionError):
    default_message = (
        "There is an untracked file in the way; delete it, or add and commit it first."
    )

    def __init__(self, paths: list[str]):
        super().__init__()
        self.paths = paths


class NoMatchingCommitError(PreconditionError):
    default_message = "Found no commit with that message."

    def __init__(self, message_text: str):
        super().__init__()
        self.message_text = message_text


# Data integrity errors


class IntegrityError(TwigError):
    """The object store is missing data or holds something unreadable."""

    pass


class ObjectNotFoundError(IntegrityError):
    default_message = "No object with that id exists."

    def __init__(self, object_id: str):
        super().__init__()
        self.object_id = object_id


class CommitNotFoundError(IntegrityError):
    default_message = "No commit with that id exists."

    def __init__(self, commit_id: str):
        super().__init__()
        self.commit_id = commit_id


class CorruptObjectError(IntegrityError):
    def __init__(self, object_id: str, reason: str):
        super().__init__(f"Object {object_id} is corrupt: {reason}")
        self.object_id = object_id
        self.reason = reason
