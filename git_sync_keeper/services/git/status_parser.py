"""Parse `git status --porcelain=v1 --branch` output"""

import re
from typing import List, Optional

from git_sync_keeper.models.repository import FileStatusEntry, RawStatus
from git_sync_keeper.logging_config import get_logger

logger = get_logger(__name__)

# ## main...origin/main [ahead 1, behind 2]
_TRACKING_HEADER = re.compile(r"^(?P<current>.+?)\.\.\.(?P<tracking>\S+)(?: \[(?P<counts>[^\]]*)\])?$")
_UNBORN_HEADER = re.compile(r"^(?:No commits yet on|Initial commit on) (?P<current>.+)$")
_AHEAD = re.compile(r"ahead (\d+)")
_BEHIND = re.compile(r"behind (\d+)")

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of paths with special characters."""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    body = path[1:-1]
    raw = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            # Octal escapes encode UTF-8 bytes one at a time
            octal = body[i + 1:i + 4]
            if len(octal) == 3 and all(c in "01234567" for c in octal):
                raw.append(int(octal, 8))
                i += 4
                continue
            raw.extend(_ESCAPES.get(nxt, nxt).encode("utf-8"))
            i += 2
            continue
        raw.extend(char.encode("utf-8"))
        i += 1
    return raw.decode("utf-8", errors="replace")


def _parse_header(header: str) -> dict:
    """Parse the `## ...` branch line into status fields."""
    result = {"current": None, "tracking": None, "ahead": 0, "behind": 0}

    if header.startswith("HEAD (no branch)"):
        return result

    unborn = _UNBORN_HEADER.match(header)
    if unborn:
        result["current"] = unborn.group("current").strip()
        return result

    tracked = _TRACKING_HEADER.match(header)
    if tracked:
        result["current"] = tracked.group("current")
        result["tracking"] = tracked.group("tracking")
        counts = tracked.group("counts") or ""
        # "[gone]" means the upstream was deleted; counters stay at 0
        ahead = _AHEAD.search(counts)
        behind = _BEHIND.search(counts)
        if ahead:
            result["ahead"] = int(ahead.group(1))
        if behind:
            result["behind"] = int(behind.group(1))
        return result

    result["current"] = header.strip() or None
    return result


def parse_status_line(line: str) -> Optional[FileStatusEntry]:
    """Parse one `XY path` entry. Returns None for lines that are not entries."""
    if len(line) < 4 or line[2] != " ":
        return None

    index_state = line[0]
    working_state = line[1]
    path = line[3:]

    # Renames and copies are reported as "old -> new"; keep the new path
    if index_state in ("R", "C") or working_state in ("R", "C"):
        if " -> " in path:
            path = path.split(" -> ", 1)[1]

    return FileStatusEntry(
        path=unquote_path(path),
        index_state=index_state,
        working_state=working_state,
    )


def parse_porcelain_status(output: str) -> RawStatus:
    """Build a RawStatus from porcelain v1 output with the --branch header."""
    header = {"current": None, "tracking": None, "ahead": 0, "behind": 0}
    files: List[FileStatusEntry] = []

    for line in output.split("\n"):
        if not line:
            continue
        if line.startswith("## "):
            header = _parse_header(line[3:])
            continue

        entry = parse_status_line(line)
        if entry is None:
            logger.debug(f"Ignoring unrecognised status line: {line!r}")
            continue
        files.append(entry)

    return RawStatus(files=tuple(files), **header)
