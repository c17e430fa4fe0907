"""Static asset providers for the bundled zone feed."""

import logging
from pathlib import Path
from typing import Protocol

from weatherhub.errors import NotFoundError

logger = logging.getLogger(__name__)

BUNDLED_ASSET_DIR = Path(__file__).parent.parent / "static"


class AssetProvider(Protocol):
    def open_asset(self, name: str) -> bytes: ...

    def has_asset(self, name: str) -> bool: ...


class DirectoryAssetProvider:
    """Reads assets from a directory. Each call re-reads the file."""

    def __init__(self, root: str | Path = BUNDLED_ASSET_DIR):
        self.root = Path(root)

    def _path(self, name: str) -> Path:
        path = (self.root / name).resolve()
        if self.root.resolve() not in path.parents:
            raise NotFoundError(f"Asset {name!r} is outside {self.root}")
        return path

    def has_asset(self, name: str) -> bool:
        try:
            return self._path(name).is_file()
        except NotFoundError:
            return False

    def open_asset(self, name: str) -> bytes:
        path = self._path(name)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"Asset {name!r} not found at {path}") from e
