"""Remote repository support: git URL parsing and temporary clones."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from .errors import PomGenError
from .logging import get_logger

PROVIDER_GITHUB = "github"
PROVIDER_GITLAB = "gitlab"
PROVIDER_BITBUCKET = "bitbucket"
PROVIDER_AZURE = "azure-devops"
PROVIDER_GENERIC = "generic"

_COMMIT = re.compile(r"^[0-9a-fA-F]{7,40}$")
_SSH = re.compile(r"^(?:ssh://)?git@(?P<host>[^:/]+)[:/](?P<path>.+)$")


class CloneError(PomGenError):
    """The repository could not be cloned or checked out."""


@dataclass(frozen=True)
class GitUrl:
    """A parsed repository URL."""

    clone_url: str
    provider: str
    owner: Optional[str] = None
    repo: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None
    path_in_repo: Optional[str] = None

    @property
    def is_file_path(self) -> bool:
        if not self.path_in_repo:
            return False
        last = self.path_in_repo.rsplit("/", 1)[-1]
        return "." in last and not last.startswith(".")


def is_commit(ref: str) -> bool:
    """Refs of 7-40 hex characters are treated as commit SHAs."""
    return bool(_COMMIT.match(ref))


def parse_git_url(url: str) -> GitUrl:
    """Parse browser or clone URLs for GitHub, GitLab, Bitbucket, Azure DevOps and plain git hosts.

    Raises ValueError when the URL cannot be interpreted.
    """
    raw = (url or "").strip()
    if not raw:
        raise ValueError("Repository URL is empty")

    ssh = _SSH.match(raw)
    if ssh:
        segments = _segments(ssh.group("path"))
        if len(segments) < 2:
            raise ValueError(f"Cannot parse git URL: {url}")
        repo = _strip_git(segments[-1])
        return GitUrl(
            clone_url=raw,
            provider=_provider_for(ssh.group("host")),
            owner="/".join(segments[:-1]),
            repo=repo,
        )

    parts = urlsplit(raw)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"Unsupported repository URL: {url}")
    host = parts.hostname or ""
    segments = _segments(parts.path)
    provider = _provider_for(host)

    if provider == PROVIDER_GITHUB:
        return _parse_github(host, segments, url)
    if provider == PROVIDER_GITLAB:
        return _parse_gitlab(parts.scheme, parts.netloc, segments, url)
    if provider == PROVIDER_BITBUCKET:
        return _parse_bitbucket(segments, url)
    if provider == PROVIDER_AZURE:
        return _parse_azure(segments, parse_qs(parts.query), url)
    return _parse_generic(raw, parts.scheme, parts.netloc, segments, url)


def _parse_github(host: str, segments: List[str], url: str) -> GitUrl:
    if len(segments) < 2:
        raise ValueError(f"Invalid GitHub URL: {url}")
    owner, repo = segments[0], _strip_git(segments[1])
    branch, commit, path = None, None, None
    if len(segments) >= 4 and segments[2] in {"tree", "blob"}:
        branch, commit = _classify_ref(segments[3])
        path = "/".join(segments[4:]) or None
    return GitUrl(
        clone_url=f"https://{host}/{owner}/{repo}.git",
        provider=PROVIDER_GITHUB,
        owner=owner,
        repo=repo,
        branch=branch,
        commit=commit,
        path_in_repo=path,
    )


def _parse_gitlab(scheme: str, netloc: str, segments: List[str], url: str) -> GitUrl:
    branch, commit, path = None, None, None
    if "-" in segments:
        marker = segments.index("-")
        project = segments[:marker]
        rest = segments[marker + 1 :]
        if len(rest) >= 2 and rest[0] in {"tree", "blob"}:
            branch, commit = _classify_ref(rest[1])
            path = "/".join(rest[2:]) or None
    else:
        project = segments
    if len(project) < 2:
        raise ValueError(f"Invalid GitLab URL: {url}")
    repo = _strip_git(project[-1])
    owner = "/".join(project[:-1])
    return GitUrl(
        clone_url=f"{scheme}://{netloc}/{owner}/{repo}.git",
        provider=PROVIDER_GITLAB,
        owner=owner,
        repo=repo,
        branch=branch,
        commit=commit,
        path_in_repo=path,
    )


def _parse_bitbucket(segments: List[str], url: str) -> GitUrl:
    if len(segments) < 2:
        raise ValueError(f"Invalid Bitbucket URL: {url}")
    owner, repo = segments[0], _strip_git(segments[1])
    branch, commit, path = None, None, None
    if len(segments) >= 4 and segments[2] == "src":
        branch, commit = _classify_ref(segments[3])
        path = "/".join(segments[4:]) or None
    return GitUrl(
        clone_url=f"https://bitbucket.org/{owner}/{repo}.git",
        provider=PROVIDER_BITBUCKET,
        owner=owner,
        repo=repo,
        branch=branch,
        commit=commit,
        path_in_repo=path,
    )


def _parse_azure(segments: List[str], query: dict, url: str) -> GitUrl:
    if len(segments) < 4 or segments[2] != "_git":
        raise ValueError(f"Invalid Azure DevOps URL: {url}")
    organisation, project, repo = segments[0], segments[1], _strip_git(segments[3])
    branch, commit, path = None, None, None
    path_values = query.get("path") or []
    if path_values and path_values[0].strip("/"):
        path = path_values[0].strip("/")
    version_values = query.get("version") or []
    if version_values and version_values[0].startswith("GB"):
        branch, commit = _classify_ref(version_values[0][2:])
    return GitUrl(
        clone_url=f"https://dev.azure.com/{organisation}/{project}/_git/{repo}",
        provider=PROVIDER_AZURE,
        owner=organisation,
        repo=repo,
        branch=branch,
        commit=commit,
        path_in_repo=path,
    )


def _parse_generic(raw: str, scheme: str, netloc: str, segments: List[str], url: str) -> GitUrl:
    if segments and segments[-1].lower().endswith(".git"):
        return GitUrl(
            clone_url=raw,
            provider=PROVIDER_GENERIC,
            owner="/".join(segments[:-1]) or None,
            repo=_strip_git(segments[-1]),
        )
    if len(segments) < 2:
        raise ValueError(f"Cannot parse git URL: {url}")
    owner, repo = segments[0], segments[1]
    return GitUrl(
        clone_url=f"{scheme}://{netloc}/{owner}/{repo}.git",
        provider=PROVIDER_GENERIC,
        owner=owner,
        repo=repo,
        path_in_repo="/".join(segments[2:]) or None,
    )


def _provider_for(host: str) -> str:
    lowered = host.lower()
    if lowered == "github.com" or lowered.endswith(".github.com"):
        return PROVIDER_GITHUB
    if "gitlab" in lowered:
        return PROVIDER_GITLAB
    if lowered == "bitbucket.org":
        return PROVIDER_BITBUCKET
    if lowered == "dev.azure.com":
        return PROVIDER_AZURE
    return PROVIDER_GENERIC


def _classify_ref(ref: str) -> Tuple[Optional[str], Optional[str]]:
    return (None, ref) if is_commit(ref) else (ref, None)


def _segments(path: str) -> List[str]:
    return [segment for segment in path.strip("/").split("/") if segment]


def _strip_git(name: str) -> str:
    return name[:-4] if name.lower().endswith(".git") else name


class RepoCloner:
    """Clones repositories into throwaway directories using the git CLI."""

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        temp_root: Path | None = None,
    ) -> None:
        self._runner = runner or self._default_runner
        self._temp_root = temp_root
        self.logger = get_logger("remote")

    def clone(self, info: GitUrl) -> Path:
        """Clone ``info`` into a fresh ``pomgen-`` temp directory and return it."""
        target = Path(tempfile.mkdtemp(prefix="pomgen-", dir=self._temp_root))
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        try:
            if info.commit:
                self._run(["git", "clone", info.clone_url, str(target)], cwd=target.parent, env=env)
                self._run(["git", "checkout", info.commit], cwd=target, env=env)
            else:
                args = ["git", "clone", "--depth", "1"]
                if info.branch:
                    args.extend(["--branch", info.branch])
                args.extend([info.clone_url, str(target)])
                self._run(args, cwd=target.parent, env=env)
        except (subprocess.CalledProcessError, OSError) as exc:
            self.cleanup(target)
            raise CloneError(f"Failed to clone {info.clone_url}: {exc}") from exc
        self.logger.debug("Cloned %s into %s", info.clone_url, target)
        return target

    def cleanup(self, path: Path) -> None:
        shutil.rmtree(path, ignore_errors=True)

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, env=env, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


__all__ = [
    "CloneError",
    "GitUrl",
    "PROVIDER_AZURE",
    "PROVIDER_BITBUCKET",
    "PROVIDER_GENERIC",
    "PROVIDER_GITHUB",
    "PROVIDER_GITLAB",
    "RepoCloner",
    "is_commit",
    "parse_git_url",
]
