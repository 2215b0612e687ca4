"""Git operations module.

Usage:
    from tekrel.git import Repository

    repo = Repository(Path("/tmp/hack"))
    match repo.remote_url():
        case Ok(url):
            print(url)
"""

from tekrel.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "Repository",
]
