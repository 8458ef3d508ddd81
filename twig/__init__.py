"""
Twig - a small local version-control system

Content-addressed blobs and commits, named branches, a staging area, a
three-way merge engine and a working-tree synchronizer, all kept under a
``.twig`` directory beside the files they track.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from twig.config import config
from twig.repository import Repository

__all__ = ["config", "Repository", "__version__"]
