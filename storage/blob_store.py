from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, Optional

from settings import get_settings

_SUFFIX = ".json"


class BlobStore:
    """Key/value store of text blobs, optionally mirrored to one file per key."""

    def __init__(self, name: str = "default", root_path: Optional[Path] = None) -> None:
        self.name = name
        self._blobs: Dict[str, str] = {}
        self.root_path = root_path
        self._lock = Lock()
        if root_path:
            root_path.mkdir(parents=True, exist_ok=True)
            self._load_existing()

    def put_blob(self, key: str, data: str) -> None:
        with self._lock:
            if self.root_path:
                path = self._path_for(key)
                staging = path.with_suffix(path.suffix + ".tmp")
                try:
                    staging.write_text(data, encoding="utf-8")
                    staging.replace(path)
                except OSError:
                    staging.unlink(missing_ok=True)
                    raise
            self._blobs[key] = data

    def get_blob(self, key: str) -> str:
        with self._lock:
            data = self._blobs.get(key)
            if data is not None:
                return data

        if self.root_path:
            path = self._path_for(key)
            if path.exists():
                data = path.read_text(encoding="utf-8")
                with self._lock:
                    self._blobs[key] = data
                return data

        raise KeyError(f"Blob with key {key!r} not found in store {self.name!r}.")

    def delete_blob(self, key: str) -> None:
        with self._lock:
            self._blobs.pop(key, None)
            if self.root_path:
                self._path_for(key).unlink(missing_ok=True)

    def list_keys(self) -> Iterable[str]:
        with self._lock:
            keys = set(self._blobs.keys())

        if self.root_path:
            keys.update(path.stem for path in self.root_path.glob(f"*{_SUFFIX}"))

        return sorted(keys)

    def _path_for(self, key: str) -> Path:
        assert self.root_path is not None
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid blob key {key!r}.")
        return self.root_path / f"{key}{_SUFFIX}"

    def _load_existing(self) -> None:
        assert self.root_path is not None
        for path in self.root_path.glob(f"*{_SUFFIX}"):
            if path.is_file():
                try:
                    self._blobs[path.stem] = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError):
                    continue


@lru_cache
def build_default_blob_store(root_path: Optional[str] = None) -> BlobStore:
    settings = get_settings()
    store_root = settings.store_path if root_path is None else root_path
    path = Path(store_root) if store_root else None
    return BlobStore(name="history", root_path=path)
