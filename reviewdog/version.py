"""Version of the reviewdog command line tool."""

# Replaced by the release tooling when a build is published.
VERSION = "master"


def version_string() -> str:
    """Return the version reported by ``reviewdog -version``."""
    return VERSION