# src/assets/photo_library.py
from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from kivy.logger import Logger

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}


class PhotoLibrary:
    """
    Append-only view of an image folder.

    poll() reports files it has not seen before, sorted by name. Files that
    disappear later stay in the list; nothing is ever removed or reordered.
    """

    def __init__(self, directory):
        self.directory = Path(directory)
        self._seen = set()
        self._refs: List[str] = []
        self._missing_logged = False

    def __len__(self):
        return len(self._refs)

    @property
    def refs(self) -> Tuple[str, ...]:
        return tuple(self._refs)

    def poll(self) -> List[str]:
        if not self.directory.is_dir():
            if not self._missing_logged:
                Logger.info(f"PhotoLibrary: no photo folder at '{self.directory}'.")
                self._missing_logged = True
            return []

        files = sorted(p for p in self.directory.iterdir()
                       if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)
        new = [str(p) for p in files if str(p) not in self._seen]
        self._seen.update(new)
        self._refs.extend(new)
        if new:
            Logger.debug(f"PhotoLibrary: found {len(new)} new photo(s).")
        return new
