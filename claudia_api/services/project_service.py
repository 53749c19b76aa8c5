"""Project listing: one hex-encoded directory per project under <claude_dir>/projects."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def decode_project_dir(name: str) -> Optional[str]:
    """Directory names are the hex encoding of the project's UTF-8 path."""
    try:
        return bytes.fromhex(name).decode("utf-8")
    except ValueError:
        return None


def _created_at(stat: os.stat_result) -> int:
    birth = getattr(stat, "st_birthtime", None)
    return int(birth if birth is not None else stat.st_ctime)


class ProjectService:
    def __init__(self, projects_dir: Path) -> None:
        self.projects_dir = Path(projects_dir)

    def list_projects(self) -> list[dict]:
        if not self.projects_dir.is_dir():
            return []
        projects = []
        for entry in sorted(self.projects_dir.iterdir(), key=lambda p: p.name):
            if not entry.is_dir():
                continue
            decoded = decode_project_dir(entry.name)
            if decoded is None:
                logger.debug("Skipping non-project directory %s", entry.name)
                continue
            projects.append(
                {
                    "id": entry.name,
                    "path": decoded,
                    "created_at": _created_at(entry.stat()),
                    "sessions": [],
                }
            )
        return projects

    def running_sessions(self) -> list[dict]:
        # Sessions are launched by the external CLI; none are tracked here.
        return []
