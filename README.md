# reviewdog

Building blocks for reviewing linter and compiler output against the changes
in a pull request: a unified diff parser, build information read from CI
environment variables, comment writers for text streams, diff sources, and
helpers for command-line settings.

## Installation

Install the package with your usual Python package installer. It has no
runtime dependencies. The test suite uses pytest, available through the
`test` extra.

## Modules

- `reviewdog.diff` parses unified diffs, including `git diff` output with
  extended headers, C-style quoted file names and
  `\ No newline at end of file` markers. `parse_multi_file` reads every file
  diff from a string, bytes or an open file and stops quietly at the first
  file diff it cannot parse; `parse_file` reads one file diff and returns
  `None` if there is none. Each `FileDiff` holds its old and new paths and
  timestamps, its extended header lines and its `Hunk`s; every `Line` records
  its `LineType` (`UNCHANGED`, `ADDED`, `DELETED`), its content, its position
  in the diff (`lnum_diff`) and its line numbers in the old and new file.
  `parse_file` raises a `DiffParseError` subclass on malformed input:
  `NoNewFileError`, `NoHunksError` or `InvalidHunkRangeError`. Lower-level
  pieces are public too: `LineReader`, `FileParser`, `HunkParser`,
  `parse_file_header`, `parse_extended_header`, `parse_hunk_range`,
  `parse_ls` and `unquote_c_style`.
- `reviewdog.cienv` builds a `BuildInfo` (owner, repo, sha, pull_request,
  branch) from the environment of GitHub Actions, Travis CI, Circle CI,
  drone.io and GitLab CI, or from the generic `CI_REPO_OWNER`,
  `CI_REPO_NAME`, `CI_COMMIT`, `CI_PULL_REQUEST` and `CI_BRANCH` variables.
  `get_build_info` returns the information together with whether this is a
  pull request build, and raises `CIEnvError` when the owner, repository or
  commit cannot be found. Inside GitHub Actions it reads the event payload
  named by `GITHUB_EVENT_PATH`; `build_info_from_github_event_path` reads such
  a payload directly, and `is_in_github_action` tells whether `GITHUB_ACTION`
  is set.
- `reviewdog.comment` writes comments to text streams. A comment is any
  object with `check_result` (having `path`, `lnum`, `col` and `lines`),
  `tool_name` and `body` attributes. `RawCommentWriter` writes the original
  output lines, `UnifiedCommentWriter` writes
  `<file>[:<lnum>[:<col>]]: [<tool name>] <message>`, and
  `MultiCommentService` passes every post on to several services and calls
  `flush` on those that have it.
- `reviewdog.diffservice` supplies diff text as bytes: `DiffString` holds a
  fixed diff and `DiffCmd` runs a command once, caching its output for all
  callers. A non-zero exit status is treated as an error
  (`subprocess.CalledProcessError`) only when the command printed nothing,
  since `diff` and `git diff` exit with 1 when changes exist.
- `reviewdog.options` holds the `Option` settings and helpers: `read_conf`
  returns the configuration file's bytes (raising `ConfigError` if none can
  be read), `tool_name` picks the name used in comments, `build_runners_map`
  splits a comma separated runner list, `diff_service` builds a `DiffCmd`
  from a shell-style command line (raising `ValueError` if it is empty),
  `non_empty_env` reads a required environment variable, and
  `github_base_url`, `gitlab_base_url` and `insecure_skip_verify` read
  settings from the environment.
- `reviewdog.version` provides `version_string`, which returns the tool
  version string (`master` in development builds).

## Example

```python
from reviewdog.diff import parse_multi_file

with open("changes.diff", encoding="utf-8") as fh:
    for file_diff in parse_multi_file(fh):
        print(file_diff.path_new, len(file_diff.hunks))
```

## Configuration file

When no path is given, `read_conf` looks in the current directory for
`.reviewdog.yaml`, `.reviewdog.yml`, `reviewdog.yaml` and `reviewdog.yml`, in
that order. It only reads the file; it does not parse it.

## Environment variables

- `REVIEWDOG_INSECURE_SKIP_VERIFY`: `insecure_skip_verify` returns `True`
  when it is exactly `true`.
- `GITHUB_API` and `GITLAB_API` override the default API base URLs returned
  by `github_base_url` and `gitlab_base_url` as `urllib.parse.SplitResult`
  values.

## What this package does not do

There is no command-line program. The package does not parse linter or
compiler output, does not filter results by diff, does not read the
configuration format, and does not post comments or checks to GitHub or
GitLab; it offers the pieces listed above for building such a tool.