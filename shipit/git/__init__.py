"""Git operations module.

Usage:
    from shipit.git import Repository

    repo = Repository(Path("/path/to/repo"))
    described = repo.describe()
    if described.is_ok() and described.unwrap() is not None:
        print(f"Tag: {described.unwrap().tag}")
"""

from shipit.git.repository import GitError, Repository, TagDescription

__all__ = ["GitError", "Repository", "TagDescription"]
