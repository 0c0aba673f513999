"""Build information taken from the environment of CI services.

Supported services: GitHub Actions, Travis CI, Circle CI, drone.io and
GitLab CI, plus a set of common ``CI_*`` variables for everything else.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Any, Iterable


class CIEnvError(Exception):
    """Required build information is missing from the environment."""


@dataclass
class BuildInfo:
    """Build information about a GitHub or GitLab project.

    ``pull_request`` is the merge request number on GitLab; 0 when unknown.
    """

    owner: str
    repo: str
    sha: str
    pull_request: int = 0
    branch: str = ""


_SLUG_ENVS = (
    "TRAVIS_REPO_SLUG",
    "DRONE_REPO",  # drone<=0.4
)
_OWNER_ENVS = (
    "CI_REPO_OWNER",
    "CIRCLE_PROJECT_USERNAME",
    "DRONE_REPO_OWNER",
    "CI_PROJECT_NAMESPACE",  # GitLab CI
)
_REPO_ENVS = (
    "CI_REPO_NAME",
    "CIRCLE_PROJECT_REPONAME",
    "DRONE_REPO_NAME",
    "CI_PROJECT_NAME",  # GitLab CI
)
_SHA_ENVS = (
    "CI_COMMIT",
    "TRAVIS_PULL_REQUEST_SHA",
    "TRAVIS_COMMIT",
    "CIRCLE_SHA1",
    "DRONE_COMMIT",
    "CI_COMMIT_SHA",  # GitLab CI
)
_BRANCH_ENVS = (
    "CI_BRANCH",
    "TRAVIS_PULL_REQUEST_BRANCH",
    "CIRCLE_BRANCH",
    "DRONE_COMMIT_BRANCH",
)
_PULL_REQUEST_ENVS = (
    "CI_PULL_REQUEST",
    "TRAVIS_PULL_REQUEST",
    "CIRCLE_PULL_REQUEST",  # CircleCI 2.0
    "CIRCLE_PR_NUMBER",  # pull request from a fork
    "DRONE_PULL_REQUEST",
)
_PR_NUMBER_RE = re.compile(r"[1-9][0-9]*$")


def get_build_info() -> tuple[BuildInfo, bool]:
    """Return the build information and whether this is a pull request build.

    Raises CIEnvError when the owner, repository or commit cannot be found.
    """
    if is_in_github_action():
        return _build_info_from_github_action()

    owner, repo = _owner_and_repo_from_slug(_SLUG_ENVS)
    if not owner:
        owner = _first_env(_OWNER_ENVS)
    if not owner:
        raise CIEnvError(
            "cannot get repo owner from environment variable. Set CI_REPO_OWNER?"
        )
    if not repo:
        repo = _first_env(_REPO_ENVS)
    if not repo:
        raise CIEnvError(
            "cannot get repo name from environment variable. Set CI_REPO_NAME?"
        )
    sha = _first_env(_SHA_ENVS)
    if not sha:
        raise CIEnvError(
            "cannot get commit SHA from environment variable. Set CI_COMMIT?"
        )
    branch = _first_env(_BRANCH_ENVS)
    pr = _pull_request_number()
    info = BuildInfo(owner=owner, repo=repo, sha=sha, pull_request=pr, branch=branch)
    return info, pr != 0


def _pull_request_number() -> int:
    for name in _PULL_REQUEST_ENVS:
        match = _PR_NUMBER_RE.search(os.environ.get(name, ""))
        if match:
            return int(match.group())
    return 0


def _first_env(names: Iterable[str]) -> str:
    for name in names:
        value = os.environ.get(name, "")
        if value:
            return value
    return ""


def _owner_and_repo_from_slug(slug_envs: Iterable[str]) -> tuple[str, str]:
    owner, sep, repo = _first_env(slug_envs).partition("/")
    if not sep:
        return "", ""
    return owner, repo


def _build_info_from_github_action() -> tuple[BuildInfo, bool]:
    event_path = os.environ.get("GITHUB_EVENT_PATH", "")
    if not event_path:
        raise CIEnvError("GITHUB_EVENT_PATH not found")
    return build_info_from_github_event_path(event_path)


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _pull_request_fields(pr: Any) -> tuple[int, str, str]:
    pr = _mapping(pr)
    head = _mapping(pr.get("head"))
    return int(pr.get("number") or 0), head.get("sha") or "", head.get("ref") or ""


def build_info_from_github_event_path(event_path: str | os.PathLike) -> tuple[BuildInfo, bool]:
    """Read build information from a GitHub Actions event payload file."""
    with open(event_path, encoding="utf-8") as f:
        event = json.load(f)
    if event is None:
        event = {}
    if not isinstance(event, dict):
        raise CIEnvError(f"unexpected GitHub event payload in {event_path}")

    repository = _mapping(event.get("repository"))
    owner = _mapping(repository.get("owner")).get("login") or ""
    repo = repository.get("name") or ""
    number, sha, ref = _pull_request_fields(event.get("pull_request"))

    # A re-run check_suite event carries its pull requests separately.
    if number == 0:
        suite_prs = _mapping(event.get("check_suite")).get("pull_requests") or []
        if suite_prs:
            number, sha, ref = _pull_request_fields(suite_prs[0])

    info = BuildInfo(owner=owner, repo=repo, sha=sha, pull_request=number, branch=ref)
    return info, number != 0


def is_in_github_action() -> bool:
    """Return True when running inside GitHub Actions."""
    return os.environ.get("GITHUB_ACTION", "") != ""