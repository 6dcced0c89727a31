from __future__ import annotations

"""
Link Manifest Writer.

Accumulates the per-project outcomes of a linking run and persists them as
the diagnostic link manifest: {"localLinks": {project: [dependencies...]}}.
"""

import logging
import os
import threading
from typing import Any, Dict, List, Optional

from monolinker.domain.link_models import LinkManifestEntry
from monolinker.infra.fs import read_json_file, write_json_file_atomic

logger = logging.getLogger(__name__)

LOCAL_LINKS_KEY = "localLinks"


class LinkManifest:
    """
    Thread-safe accumulator of LinkManifestEntry records.

    Workers may add entries in any order; the persisted key order follows the
    project order given at construction.
    """

    def __init__(self, project_order: Optional[List[str]] = None) -> None:
        self._order = list(project_order or [])
        self._entries: Dict[str, LinkManifestEntry] = {}
        self._lock = threading.Lock()

    def add(self, entry: LinkManifestEntry) -> None:
        with self._lock:
            self._entries[entry.project] = entry
            if entry.project not in self._order:
                self._order.append(entry.project)

    @property
    def entries(self) -> List[LinkManifestEntry]:
        """Entries in project order."""
        with self._lock:
            return [self._entries[name] for name in self._order if name in self._entries]

    def to_dict(self) -> Dict[str, Any]:
        local_links: Dict[str, List[str]] = {}
        for entry in self.entries:
            if entry.local_links:
                local_links[entry.project] = list(entry.local_links)
        return {LOCAL_LINKS_KEY: local_links}

    def save(self, path: str) -> None:
        """
        Persist the manifest atomically.

        Args:
            path: Destination of the link manifest.
        """
        write_json_file_atomic(path, self.to_dict())
        logger.info(f"Link manifest written: {path}")

    @staticmethod
    def load(path: str) -> Optional[Dict[str, List[str]]]:
        """
        Read a previously written manifest.

        Returns:
            Optional[Dict[str, List[str]]]: The localLinks map, or None if the
            file is missing or unreadable.
        """
        if not os.path.exists(path):
            return None
        try:
            data = read_json_file(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable link manifest {path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring link manifest {path}: expected a JSON object")
            return None
        links = data.get(LOCAL_LINKS_KEY)
        if not isinstance(links, dict):
            return {}
        return {
            str(project): [str(d) for d in deps]
            for project, deps in links.items()
            if isinstance(deps, list)
        }
