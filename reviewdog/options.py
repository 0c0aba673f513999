"""Command line options and the helpers that turn them into services."""

from __future__ import annotations

import os
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import SplitResult, urlsplit

from reviewdog.diffservice import DiffCmd

DEFAULT_GITHUB_API = "https://api.github.com/"
DEFAULT_GITLAB_API = "https://gitlab.com/api/v4"

DEFAULT_CONFIG_FILES = (
    ".reviewdog.yaml",
    ".reviewdog.yml",
    "reviewdog.yaml",
    "reviewdog.yml",
)

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


class ConfigError(Exception):
    """A configuration file or required setting is missing."""


@dataclass
class Option:
    """Options given on the command line."""

    version: bool = False
    diff_cmd: str = ""
    diff_strip: int = 1
    efms: list[str] = field(default_factory=list)
    f: str = ""
    list: bool = False
    name: str = ""
    ci: str = ""
    conf: str = ""
    runners: str = ""
    reporter: str = "local"
    level: str = "error"
    guess_pull_request: bool = False


def read_conf(conf: Optional[str | os.PathLike] = "") -> bytes:
    """Return the contents of the configuration file.

    With no ``conf`` the default file names are tried in order.
    Raises ConfigError if no candidate can be read.
    """
    candidates = [conf] if conf else list(DEFAULT_CONFIG_FILES)
    for candidate in candidates:
        try:
            return Path(candidate).read_bytes()
        except OSError:
            continue
    raise ConfigError(".reviewdog.yml not found")


def build_runners_map(runners: str) -> dict[str, bool]:
    """Map each non-blank name of a comma separated list to True."""
    names = (part.strip() for part in runners.split(","))
    return {name: True for name in names if name}


def non_empty_env(env: str) -> str:
    """Return the value of an environment variable that must be set."""
    value = os.environ.get(env, "")
    if not value:
        raise ConfigError(f"environment variable ${env} is not set")
    return value


def tool_name(opt: Option) -> str:
    """Return the tool name used in comments: ``name``, else ``f``."""
    return opt.name or opt.f


def diff_service(command: str, strip: int) -> DiffCmd:
    """Build a diff service running a shell-style command line."""
    try:
        args = shlex.split(command)
    except ValueError as exc:
        raise ValueError(f"invalid diff command: {exc}") from None
    if not args:
        raise ValueError("diff command is empty")
    return DiffCmd(args, strip)


def _parse_base_url(service: str, env: str, default: str) -> SplitResult:
    base_url = os.environ.get(env, "") or default
    try:
        if _CONTROL_CHARS_RE.search(base_url):
            raise ValueError("invalid control character in URL")
        return urlsplit(base_url)
    except ValueError as exc:
        raise ValueError(f"{service} base URL is invalid: {base_url}, {exc}") from None


def github_base_url() -> SplitResult:
    """Return the GitHub API base URL, from ``GITHUB_API`` if set."""
    return _parse_base_url("GitHub", "GITHUB_API", DEFAULT_GITHUB_API)


def gitlab_base_url() -> SplitResult:
    """Return the GitLab API base URL, from ``GITLAB_API`` if set."""
    return _parse_base_url("GitLab", "GITLAB_API", DEFAULT_GITLAB_API)


def insecure_skip_verify() -> bool:
    """Whether TLS verification is disabled by the environment."""
    return os.environ.get("REVIEWDOG_INSECURE_SKIP_VERIFY", "") == "true"