import json

import pytest

from reviewdog.cienv import (
    BuildInfo,
    CIEnvError,
    build_info_from_github_event_path,
    get_build_info,
    is_in_github_action,
)

CLEAN_ENVS = [
    "CIRCLE_BRANCH",
    "CIRCLE_PROJECT_REPONAME",
    "CIRCLE_PROJECT_USERNAME",
    "CIRCLE_PR_NUMBER",
    "CIRCLE_PULL_REQUEST",
    "CIRCLE_SHA1",
    "CI_BRANCH",
    "CI_COMMIT",
    "CI_COMMIT_SHA",
    "CI_PROJECT_NAME",
    "CI_PROJECT_NAMESPACE",
    "CI_PULL_REQUEST",
    "CI_REPO_NAME",
    "CI_REPO_OWNER",
    "DRONE_COMMIT",
    "DRONE_COMMIT_BRANCH",
    "DRONE_PULL_REQUEST",
    "DRONE_REPO",
    "DRONE_REPO_NAME",
    "DRONE_REPO_OWNER",
    "TRAVIS_COMMIT",
    "TRAVIS_PULL_REQUEST",
    "TRAVIS_PULL_REQUEST_BRANCH",
    "TRAVIS_PULL_REQUEST_SHA",
    "TRAVIS_REPO_SLUG",
    "GITHUB_ACTION",
    "GITHUB_EVENT_PATH",
]


@pytest.fixture
def env(monkeypatch):
    for key in CLEAN_ENVS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_travis(env):
    env.setenv("TRAVIS_REPO_SLUG", "invalid repo slug")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("TRAVIS_REPO_SLUG", "haya14busa/reviewdog")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("TRAVIS_PULL_REQUEST_SHA", "sha")
    _, is_pr = get_build_info()
    assert is_pr is False

    env.setenv("TRAVIS_PULL_REQUEST", "str")
    _, is_pr = get_build_info()
    assert is_pr is False

    env.setenv("TRAVIS_PULL_REQUEST", "1")
    info, is_pr = get_build_info()
    assert is_pr is True
    assert info.pull_request == 1

    env.setenv("TRAVIS_PULL_REQUEST", "false")
    _, is_pr = get_build_info()
    assert is_pr is False


def test_travis_slug_split(env):
    env.setenv("TRAVIS_REPO_SLUG", "haya14busa/reviewdog")
    env.setenv("TRAVIS_PULL_REQUEST_SHA", "sha")
    info, _ = get_build_info()
    assert (info.owner, info.repo, info.sha) == ("haya14busa", "reviewdog", "sha")


def test_circleci(env):
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CIRCLE_PR_NUMBER", "1")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CIRCLE_PROJECT_USERNAME", "haya14busa")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CIRCLE_PROJECT_REPONAME", "reviewdog")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CIRCLE_SHA1", "sha1")
    info, is_pr = get_build_info()
    assert is_pr is True
    assert info == BuildInfo(owner="haya14busa", repo="reviewdog", pull_request=1, sha="sha1")


def test_droneio(env):
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("DRONE_PULL_REQUEST", "1")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("DRONE_REPO", "invalid")
    with pytest.raises(CIEnvError):
        get_build_info()
    env.delenv("DRONE_REPO")

    env.setenv("DRONE_REPO_OWNER", "haya14busa")
    with pytest.raises(CIEnvError):
        get_build_info()
    env.delenv("DRONE_REPO_OWNER")

    env.setenv("DRONE_REPO_NAME", "reviewdog")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("DRONE_REPO_NAME", "reviewdog")
    env.setenv("DRONE_REPO_OWNER", "haya14busa")
    env.setenv("DRONE_COMMIT", "sha1")
    info, is_pr = get_build_info()
    assert is_pr is True
    assert info == BuildInfo(owner="haya14busa", repo="reviewdog", pull_request=1, sha="sha1")


def test_common(env):
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CI_PULL_REQUEST", "1")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CI_REPO_OWNER", "haya14busa")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CI_REPO_NAME", "reviewdog")
    with pytest.raises(CIEnvError):
        get_build_info()

    env.setenv("CI_COMMIT", "sha1")
    info, is_pr = get_build_info()
    assert is_pr is True
    assert info == BuildInfo(owner="haya14busa", repo="reviewdog", pull_request=1, sha="sha1")


def test_circle_pull_request_url(env):
    env.setenv("CI_REPO_OWNER", "haya14busa")
    env.setenv("CI_REPO_NAME", "reviewdog")
    env.setenv("CI_COMMIT", "sha1")
    env.setenv("CI_BRANCH", "topic")
    env.setenv("CIRCLE_PULL_REQUEST", "https://example.com/haya14busa/reviewdog/pull/285")
    info, is_pr = get_build_info()
    assert is_pr is True
    assert info.pull_request == 285
    assert info.branch == "topic"


PULL_REQUEST_EVENT = {
    "pull_request": {
        "number": 285,
        "head": {"sha": "cb23119096646023c05e14ea708b7f20cee906d5", "ref": "go1.13"},
    },
    "repository": {"owner": {"login": "reviewdog"}, "name": "reviewdog"},
}

RERUN_EVENT = {
    "repository": {"owner": {"login": "reviewdog"}, "name": "reviewdog"},
    "check_suite": {
        "after": "ba8f36cd3eb401e9de9ee5718e11d390fdbe4afa",
        "pull_requests": [
            {
                "number": 286,
                "head": {
                    "sha": "ba8f36cd3eb401e9de9ee5718e11d390fdbe4afa",
                    "ref": "github-actions-env",
                },
            }
        ],
    },
}


def write_event(tmp_path, event):
    path = tmp_path / "event.json"
    path.write_text(json.dumps(event), encoding="utf-8")
    return path


def test_github_event_pull_request(tmp_path):
    info, is_pr = build_info_from_github_event_path(write_event(tmp_path, PULL_REQUEST_EVENT))
    assert info == BuildInfo(
        owner="reviewdog",
        repo="reviewdog",
        sha="cb23119096646023c05e14ea708b7f20cee906d5",
        pull_request=285,
        branch="go1.13",
    )
    assert is_pr is True


def test_github_event_rerun(tmp_path):
    info, is_pr = build_info_from_github_event_path(write_event(tmp_path, RERUN_EVENT))
    assert info == BuildInfo(
        owner="reviewdog",
        repo="reviewdog",
        sha="ba8f36cd3eb401e9de9ee5718e11d390fdbe4afa",
        pull_request=286,
        branch="github-actions-env",
    )
    assert is_pr is True


def test_github_event_push_is_not_pull_request(tmp_path):
    event = {"repository": {"owner": {"login": "reviewdog"}, "name": "reviewdog"}}
    info, is_pr = build_info_from_github_event_path(write_event(tmp_path, event))
    assert is_pr is False
    assert info.pull_request == 0
    assert info.owner == "reviewdog"


def test_github_event_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        build_info_from_github_event_path(tmp_path / "missing.json")


def test_github_action_via_environment(env, tmp_path):
    env.setenv("GITHUB_ACTION", "run")
    env.setenv("GITHUB_EVENT_PATH", str(write_event(tmp_path, PULL_REQUEST_EVENT)))
    assert is_in_github_action() is True
    info, is_pr = get_build_info()
    assert is_pr is True
    assert info.pull_request == 285


def test_github_action_without_event_path(env):
    env.setenv("GITHUB_ACTION", "run")
    with pytest.raises(CIEnvError):
        get_build_info()


def test_is_in_github_action_false(env):
    assert is_in_github_action() is False