"""Reading branch, commit and remote information from a git work tree."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass

REF_HEAD_PREFIX = "refs/heads/"


@dataclass
class GitInfo:
    """What the build records about the repository it came from."""

    valid: bool = False
    repo_url: str = ""
    branch_name: str = ""
    commit_hash: str = ""
    last_commit_message: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {}
        if self.repo_url:
            data["repo"] = self.repo_url
        data["branch"] = self.branch_name
        data["commit"] = self.commit_hash
        data["message"] = self.last_commit_message
        return data


def _git(base_dir: str, *args: str) -> str:
    completed = subprocess.run(
        ["git", "-C", base_dir, *args],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
    )
    if completed.returncode != 0:
        raise RuntimeError(completed.stderr.decode(errors="replace").strip())
    return completed.stdout.decode(errors="replace")


def read_git_info(base_dir: str) -> GitInfo:
    """Read git information for the repository rooted at ``base_dir``."""
    info = GitInfo()
    if not os.path.exists(os.path.join(base_dir, ".git")):
        print(f"fail to open git {base_dir} : repository does not exist")
        return info
    try:
        commit = _git(base_dir, "rev-parse", "HEAD").strip()
    except (OSError, RuntimeError) as exc:
        print(f"repo.Head error : {exc}")
        return info
    try:
        branch = _git(base_dir, "symbolic-ref", "-q", "HEAD").strip()
    except (OSError, RuntimeError):
        branch = "HEAD"
    try:
        info.repo_url = _git(base_dir, "config", "--get", "remote.origin.url").strip()
    except (OSError, RuntimeError):
        pass
    if len(branch) > len(REF_HEAD_PREFIX) and branch.startswith(REF_HEAD_PREFIX):
        branch = branch[len(REF_HEAD_PREFIX) :]
    info.branch_name = branch
    info.commit_hash = commit
    try:
        info.last_commit_message = _git(base_dir, "log", "-1", "--format=%B", commit)
    except (OSError, RuntimeError) as exc:
        print(f"commit log iterating : {exc}")
    info.valid = True
    return info