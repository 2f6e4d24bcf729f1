"""
Picture catalog - resolves @image names to files.

A catalog is loaded from a JSON manifest:

```
{
  "pictures": [
    {"name": "sunset", "path": "images/sunset.png"},
    {"name": "coffee_cup", "path": "images/coffee.png"}
  ]
}
```

Relative paths resolve against the manifest's directory. Invalid
entries are logged and skipped; an unknown name at lookup time is
logged and resolves to None so the beat carries on without it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import jsonschema

from chatflow.chat.commands import ChatError

logger = logging.getLogger(__name__)


class PictureManifestError(ChatError):
    """A picture manifest is not a JSON object with a "pictures" list."""


PICTURE_MANIFEST_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["pictures"],
    "properties": {
        "pictures": {"type": "array"},
    },
}

PICTURE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["name", "path"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "path": {"type": "string", "minLength": 1},
    },
}


@dataclass(frozen=True)
class Picture:
    """A named picture file."""
    name: str
    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, 'path', Path(self.path))


class PictureCatalog:
    """
    Name -> picture lookup. The first picture registered under a name wins.
    """

    def __init__(self, pictures: Iterable[Picture] = ()):
        self._pictures: dict[str, Picture] = {}
        for picture in pictures:
            self.add(picture)

    @classmethod
    def load(cls, path: str | Path) -> PictureCatalog:
        """
        Load a catalog from a JSON manifest.

        Raises:
            PictureManifestError: If the manifest itself is malformed.
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        try:
            jsonschema.validate(instance=data, schema=PICTURE_MANIFEST_SCHEMA)
        except jsonschema.ValidationError as e:
            raise PictureManifestError(f"Invalid picture manifest {path}: {e.message}") from e

        catalog = cls()
        base_dir = path.parent
        for entry in data['pictures']:
            try:
                jsonschema.validate(instance=entry, schema=PICTURE_SCHEMA)
            except jsonschema.ValidationError as e:
                logger.error("Skipping picture entry in %s: %s", path, e.message)
                continue

            picture_path = Path(entry['path'])
            if not picture_path.is_absolute():
                picture_path = base_dir / picture_path
            if not picture_path.exists():
                logger.warning("Picture file for '%s' not found: %s", entry['name'], picture_path)

            catalog.add(Picture(name=entry['name'], path=picture_path))

        logger.info("Loaded %d pictures from %s.", len(catalog), path)
        return catalog

    def add(self, picture: Picture) -> None:
        if picture.name in self._pictures:
            logger.warning("Duplicate picture name '%s' ignored.", picture.name)
            return
        self._pictures[picture.name] = picture

    def get(self, name: str) -> Optional[Picture]:
        return self._pictures.get(name)

    def resolve(self, name: str) -> Optional[Path]:
        """Get the file for a picture name, or None (logged) if unknown."""
        picture = self._pictures.get(name)
        if picture is None:
            logger.error("Image '%s' not found in picture catalog.", name)
            return None
        return picture.path

    def names(self) -> list[str]:
        return list(self._pictures)

    def __contains__(self, name: object) -> bool:
        return name in self._pictures

    def __len__(self) -> int:
        return len(self._pictures)

    def __iter__(self) -> Iterator[Picture]:
        return iter(self._pictures.values())
