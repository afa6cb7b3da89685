"""Parse a markdown-style outline into projects with tasks."""

import re
from typing import Any

_ITEM = re.compile(r"^(\s*)[-*]\s+(.+)$")


def parse_outline(text: str) -> list[dict[str, Any]]:
    """
    Turn an outline into ``[{"name": ..., "tasks": [...]}, ...]``.

    Unindented ``- item`` lines start a project; indented items become tasks
    of the project above. Blank lines, ``#`` comments, and indented items
    before the first project are ignored.

    Example:
        - Website Redesign
          - Research competitors
          - Build prototype
        - Marketing
          - Draft copy
    """
    projects: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _ITEM.match(line)
        if not match:
            continue

        indent, content = match.group(1), match.group(2).strip()
        if not indent:
            current = {"name": content, "tasks": []}
            projects.append(current)
        elif current is not None:
            current["tasks"].append(content)

    return projects
