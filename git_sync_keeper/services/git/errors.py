"""Translate raw git failures into the git-sync-keeper error taxonomy"""

import re
from typing import Optional, Tuple, Type

import git

from git_sync_keeper.exceptions import (
    GitOperationError,
    NetworkOrAuthError,
    NotARepositoryError,
    RemoteBranchMissingError,
    UnknownGitError,
)

_STREAM_RE = re.compile(r"(?:stderr|stdout): '(?P<text>.*)'", re.DOTALL)

PERMISSION_DENIED_MESSAGE = (
    "Permission denied. Please check:\n"
    "1. Remote URL is correct\n"
    "2. You have push access\n"
    "3. SSH key is configured (for SSH URLs)\n"
    "4. Personal access token is set (for HTTPS URLs)"
)
REPOSITORY_NOT_FOUND_MESSAGE = (
    "Remote repository not found. Please:\n"
    "1. Check the remote URL\n"
    "2. Ensure the repository exists on the hosting service\n"
    "3. Verify you have access to the repository"
)
HOST_UNRESOLVED_MESSAGE = "Cannot resolve host. Check your internet connection and remote URL."
REMOTE_EXISTS_MESSAGE = "Remote already configured. Update the remote URL instead."
NO_UPSTREAM_MESSAGE = "No remote configured. Please add a remote first."
LOCKED_MESSAGE = (
    "Git repository is locked. Another git process may be running. "
    "Please try again in a moment."
)


def missing_remote_branch_message(branch: str, remote: str) -> str:
    return (
        f"Branch '{branch}' doesn't exist on remote '{remote}'.\n\n"
        "You need to push this branch to the remote first:\n"
        "1. Push to upload your local commits\n"
        "2. Then you can pull to sync future changes"
    )


# (substrings matched case-insensitively, exception class, friendly message or None to pass through)
_RULES: Tuple[Tuple[Tuple[str, ...], Type[GitOperationError], Optional[str]], ...] = (
    (("correct access rights", "permission denied", "authentication failed"),
     NetworkOrAuthError, PERMISSION_DENIED_MESSAGE),
    (("repository not found", "does not appear to be a git repository"),
     NetworkOrAuthError, REPOSITORY_NOT_FOUND_MESSAGE),
    (("could not resolve host", "could not read from remote", "connection refused",
      "connection timed out", "unable to access"),
     NetworkOrAuthError, None),
    (("remote origin already exists", "already exists"),
     UnknownGitError, REMOTE_EXISTS_MESSAGE),
    (("no upstream", "no configured push destination"),
     UnknownGitError, NO_UPSTREAM_MESSAGE),
    (("index.lock",),
     UnknownGitError, LOCKED_MESSAGE),
)


def git_error_text(error: Exception) -> str:
    """Extract the human-readable part of a GitPython error."""
    if isinstance(error, git.exc.GitCommandError):
        # "nothing to commit" and friends are reported on stdout
        for stream in (error.stderr, error.stdout):
            match = _STREAM_RE.search(stream or "")
            text = (match.group("text") if match else stream or "").strip()
            if text:
                return text
        return f"git exited with status {error.status}"
    return str(error)


def classify_git_error(operation: str, error: Exception, repo_path: str = "") -> Exception:
    """Map a git failure onto a typed exception.

    Unrecognised failures become UnknownGitError with the git message preserved.
    """
    text = git_error_text(error)
    lowered = text.lower()

    if "not a git repository" in lowered and "does not appear" not in lowered:
        return NotARepositoryError(repo_path)

    if "couldn't find remote ref" in lowered:
        return RemoteBranchMissingError(operation, text)

    for needles, error_class, friendly in _RULES:
        if any(needle in lowered for needle in needles):
            return error_class(operation, friendly or text)

    return UnknownGitError(operation, text)
