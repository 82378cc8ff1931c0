"""Read commits, tags, and refs from a git checkout."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .commits import CommitAuthor, RawCommit
from .utils import log_debug

COMMIT_SEPARATOR = "----"
LOG_FORMAT = f"{COMMIT_SEPARATOR}%n%s|%h|%an|%ae%n%b"


def _git(project_root: Path, args: Sequence[str]) -> str:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(project_root),
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise RuntimeError("git is required to read commits but was not found in PATH.") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        detail = f": {stderr}" if stderr else ""
        raise RuntimeError(
            f"git {' '.join(args)} failed (exit status {exc.returncode}){detail}"
        ) from exc
    return result.stdout


def parse_git_log(output: str) -> list[RawCommit]:
    """Split ``git log`` output produced with ``LOG_FORMAT`` into records."""
    commits: list[RawCommit] = []
    chunks = output.split(f"{COMMIT_SEPARATOR}\n")[1:]
    for chunk in chunks:
        first_line, _, body = chunk.partition("\n")
        parts = first_line.split("|")
        if len(parts) < 4:
            continue
        # Subjects may contain the separator; the trailing three fields never do.
        message = "|".join(parts[:-3])
        short_hash, author_name, author_email = parts[-3:]
        commits.append(
            RawCommit(
                message=message,
                short_hash=short_hash,
                author=CommitAuthor(name=author_name, email=author_email),
                body=body,
            )
        )
    return commits


def get_git_diff(project_root: Path, from_ref: Optional[str], to_ref: str = "HEAD") -> list[RawCommit]:
    """Return commits reachable from ``to_ref`` but not ``from_ref``, newest first."""
    revision = f"{from_ref}...{to_ref}" if from_ref else to_ref
    log_debug(f"reading git log for {revision}")
    output = _git(project_root, ["--no-pager", "log", revision, f"--pretty={LOG_FORMAT}"])
    return parse_git_log(output)


def get_last_git_tag(project_root: Path) -> Optional[str]:
    """Return the most recent tag reachable from HEAD, if any."""
    try:
        tag = _git(project_root, ["describe", "--tags", "--abbrev=0"]).strip()
    except RuntimeError:
        return None
    return tag or None


def get_current_git_ref(project_root: Path) -> str:
    """Return the current branch name, or ``HEAD`` when detached."""
    try:
        ref = _git(project_root, ["rev-parse", "--abbrev-ref", "HEAD"]).strip()
    except RuntimeError:
        return "HEAD"
    return ref or "HEAD"


def get_remote_url(project_root: Path, remote: str = "origin") -> Optional[str]:
    """Return the URL configured for ``remote``, or ``None`` outside a checkout."""
    try:
        url = _git(project_root, ["remote", "get-url", remote]).strip()
    except RuntimeError:
        return None
    return url or None
