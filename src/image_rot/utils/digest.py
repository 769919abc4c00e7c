"""Digest extraction and tag series utilities."""

import re

# Everything up to and including the digest marker of an image reference
DIGEST_MARKER_PATTERN = re.compile(r".*@sha256:", re.IGNORECASE)


def extract_digest(image: str) -> str:
    """Extract the hex digest from an image reference.

    Args:
        image: Image reference (e.g., "repo/img@sha256:abc123")

    Returns:
        The hex part after "@sha256:", or an empty string when the image is
        referenced by tag only
    """
    if not image:
        return ""

    match = DIGEST_MARKER_PATTERN.match(image)
    if not match:
        return ""

    return image[match.end() :]


def series_prefix(tag: str, digest: str) -> str:
    """Derive the tag series prefix by removing the digest from a tag name.

    Args:
        tag: Tag name (e.g., "myapp-abc123")
        digest: Digest part contained in the tag (e.g., "abc123")

    Returns:
        Tag without its first digest occurrence (e.g., "myapp-"), or an empty
        string when the tag is empty
    """
    if not tag:
        return ""
    return tag.replace(digest, "", 1)
