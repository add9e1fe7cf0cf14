"""Package manager backends, one module per package manager family."""

from __future__ import annotations


def strip_package_name(token: str, package: str) -> str | None:
    """Extract the version from a ``<name>-<version>`` token.

    Returns None when the token is not for ``package`` (e.g. ``nginx-mod``
    when looking for ``nginx``).
    """
    prefix = f"{package}-"
    if not token.startswith(prefix):
        return None
    rest = token[len(prefix):]
    if not rest or not rest[0].isdigit():
        return None
    return rest
