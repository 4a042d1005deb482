"""
Destination store and issue thread collaborators.
"""

from .base import Committer, ObjectStore
from .github import GitHubAPI, GitHubIssue, GitHubRepository, join_comment_bodies

__all__ = [
    "Committer",
    "ObjectStore",
    "GitHubAPI",
    "GitHubIssue",
    "GitHubRepository",
    "join_comment_bodies",
]
