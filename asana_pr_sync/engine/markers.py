"""Comment markers.

A marker is an opaque string appended to a comment body on its own line so
the same logical comment can be found again on a later run. A body carries
a marker when one of its lines, ignoring surrounding whitespace, is exactly
the marker. Matching whole lines keeps ``deploy`` from matching a comment
tagged ``deploy-preview``.
"""


def tag_body(body: str, marker: str | None) -> str:
    """Append ``marker`` to ``body`` on its own line.

    An empty or missing marker leaves the body unchanged.
    """
    if not marker:
        return body
    return f"{body}\n{marker}\n"


def has_marker(body: str, marker: str) -> bool:
    """Return True if ``body`` carries ``marker``."""
    if not marker:
        return False
    token = marker.strip()
    if "\n" in token:
        return token in body
    return any(line.strip() == token for line in body.splitlines())
