"""Repository URL validation and naming."""

import re
from typing import Sequence

from ..exceptions import InvalidRepositoryUrlError

_REPO_NAME_RE = re.compile(r"/([^/]+?)(\.git)?/?$")


def validate_repository_url(
    url: str,
    allowed_hosts: Sequence[str] = ("github.com", "gitlab.com"),
    require_https: bool = True,
) -> str:
    """Check a repository URL before anything touches the network.

    Args:
        url: URL as entered by the user
        allowed_hosts: Domains the URL must reference (empty = any)
        require_https: Require the https:// scheme

    Returns:
        The stripped URL

    Raises:
        InvalidRepositoryUrlError: If any rule fails
    """
    url = (url or "").strip()
    if not url:
        raise InvalidRepositoryUrlError(url, "Repository URL is required")
    if require_https and not url.startswith("https://"):
        raise InvalidRepositoryUrlError(url, "URL must start with https://")
    if allowed_hosts and not any(host in url for host in allowed_hosts):
        hosts = " or ".join(allowed_hosts)
        raise InvalidRepositoryUrlError(url, f"Only {hosts} repositories are supported")
    repository_name(url)
    return url


def repository_name(url: str) -> str:
    """Last path component of the URL without a ``.git`` suffix.

    >>> repository_name("https://github.com/octo/hello-world.git")
    'hello-world'
    """
    match = _REPO_NAME_RE.search(url.strip())
    if not match:
        raise InvalidRepositoryUrlError(url, "Cannot determine repository name")
    return match.group(1)
