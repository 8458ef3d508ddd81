"""
Immutable repository objects.

Blobs snapshot one file at one path; commits snapshot the whole tracked tree
together with lineage metadata. Both are identified by a SHA-1 digest of their
canonical content, so equal content always yields the same id.
"""

import base64
import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

ID_LENGTH = 40

# Timestamp used by the root commit of every repository.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def compute_blob_id(path: str, content: bytes) -> str:
    """Hash a file's path and raw bytes into a blob id."""
    digest = hashlib.sha1()
    digest.update(b"blob\0")
    digest.update(path.encode("utf-8"))
    digest.update(b"\0")
    digest.update(content)
    return digest.hexdigest()


def compute_commit_id(
    tree: Dict[str, str], parents: List[str], message: str, timestamp: str
) -> str:
    """Hash a commit's tree, parents, message and timestamp into a commit id."""
    canonical = json.dumps(
        {
            "tree": tree,
            "parents": list(parents),
            "message": message,
            "timestamp": timestamp,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    digest = hashlib.sha1()
    digest.update(b"commit\0")
    digest.update(canonical.encode("utf-8"))
    return digest.hexdigest()


def format_log_date(timestamp: datetime) -> str:
    """Render a timestamp like ``Thu Jan 1 00:00:00 1970 +0000``."""
    return (
        f"{timestamp:%a %b} {timestamp.day} "
        f"{timestamp:%H:%M:%S %Y} {timestamp:%z}"
    )


@dataclass(frozen=True)
class Blob:
    """
    Snapshot of one file's bytes at one working-tree path.

    Attributes:
        blob_id: Hash of ``(path, content)``
        path: Working-tree path, relative and in POSIX form
        content: Raw file bytes
    """

    blob_id: str
    path: str
    content: bytes

    @classmethod
    def from_content(cls, path: str, content: bytes) -> "Blob":
        """Create a blob, deriving its id from path and content."""
        return cls(blob_id=compute_blob_id(path, content), path=path, content=content)

    def to_dict(self) -> Dict[str, Any]:
        """Convert blob to dictionary for serialization."""
        return {
            "type": "blob",
            "blob_id": self.blob_id,
            "path": self.path,
            "content": base64.b64encode(self.content).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Blob":
        """Create blob from dictionary."""
        return cls(
            blob_id=data["blob_id"],
            path=data["path"],
            content=base64.b64decode(data["content"]),
        )

    def to_json(self) -> str:
        """Convert blob to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "Blob":
        """Create blob from JSON string."""
        return cls.from_dict(json.loads(json_str))


@dataclass(frozen=True)
class Commit:
    """
    Snapshot of the entire tracked tree plus lineage metadata.

    A commit has no parents only when it is the root commit, and two parents
    only when it was produced by a merge. The first parent is always the
    branch that was checked out at the time.
    """

    commit_id: str
    message: str
    timestamp: datetime
    parents: List[str] = field(default_factory=list)
    tree: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        message: str,
        tree: Dict[str, str],
        parents: List[str],
        timestamp: datetime,
    ) -> "Commit":
        """Create a commit, deriving its id from its contents."""
        commit_id = compute_commit_id(tree, parents, message, timestamp.isoformat())
        return cls(
            commit_id=commit_id,
            message=message,
            timestamp=timestamp,
            parents=list(parents),
            tree=dict(tree),
        )

    @property
    def is_merge(self) -> bool:
        return len(self.parents) == 2

    @property
    def is_root(self) -> bool:
        return not self.parents

    def tracks(self, path: str) -> bool:
        """Check whether this commit's tree contains ``path``."""
        return path in self.tree

    def format_log_entry(self, abbrev_length: int = 7) -> str:
        """
        Format this commit as one ``log`` entry.

        Merge commits include a ``Merge:`` line with both parents abbreviated.
        """
        lines = ["===", f"commit {self.commit_id}"]
        if self.is_merge:
            first, second = self.parents
            lines.append(f"Merge: {first[:abbrev_length]} {second[:abbrev_length]}")
        lines.append(f"Date: {format_log_date(self.timestamp)}")
        lines.append(self.message)
        lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert commit to dictionary for serialization."""
        return {
            "type": "commit",
            "commit_id": self.commit_id,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "parents": list(self.parents),
            "tree": dict(self.tree),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        """Create commit from dictionary."""
        return cls(
            commit_id=data["commit_id"],
            message=data["message"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            parents=list(data.get("parents", [])),
            tree=dict(data.get("tree", {})),
        )

    def to_json(self) -> str:
        """Convert commit to JSON string."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    @classmethod
    def from_json(cls, json_str: str) -> "Commit":
        """Create commit from JSON string."""
        return cls.from_dict(json.loads(json_str))
