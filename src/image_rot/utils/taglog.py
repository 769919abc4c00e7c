"""Parser for decorated git log output."""

import re

from ..exceptions import TagLogParseError
from ..models import TagLogEntry

# "<unix seconds>  <decoration>" as printed by --pretty="format:%at %d"
LOG_LINE_PATTERN = re.compile(r"^(\d+)\s{2}(.*)")

# "tag: <name>" inside a decoration such as "(HEAD -> main, tag: v1)"
TAG_PATTERN = re.compile(r"tag:\s([^,)]+)", re.IGNORECASE)


def extract_tag(decoration: str, target: str) -> str:
    """Find the tag in a decoration whose name contains the target.

    Args:
        decoration: Ref decoration text (e.g., "(tag: myapp-abc123, tag: v2)")
        target: Substring to look for (digest or series prefix)

    Returns:
        The last matching tag name in left-to-right order, or an empty string
    """
    tag = ""
    for match in TAG_PATTERN.finditer(decoration):
        name = match.group(1)
        if target in name:
            tag = name
    return tag


def parse_tag_log(output: str | None, target: str) -> TagLogEntry:
    """Parse the first line of git log output into a TagLogEntry.

    Args:
        output: Raw log output, possibly empty
        target: Substring the wanted tag name contains

    Returns:
        TagLogEntry with the commit timestamp in milliseconds and the matched
        tag. Empty output gives an entry without timestamp or tag.

    Raises:
        TagLogParseError: If the output does not start with a timestamp
    """
    if not output:
        return TagLogEntry()

    line = output.splitlines()[0]
    match = LOG_LINE_PATTERN.match(line)
    if not match:
        raise TagLogParseError(output)

    timestamp, decoration = match.groups()
    return TagLogEntry(
        timestamp=int(timestamp) * 1000,
        matched_tag=extract_tag(decoration, target),
    )
