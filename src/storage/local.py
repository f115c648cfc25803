import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from .base import BaseStorage


logger = logging.getLogger("storage")


class LocalStorage(BaseStorage):
    """Object storage on the local filesystem. References are ``file://`` URIs."""

    def __init__(self, root: str = "data/storage"):
        self.root = Path(root).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RuntimeError(f"Error creating local storage root {self.root}: {e}")

    def _path_for_key(self, key: str) -> Path:
        path = (self.root / key.lstrip("/")).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Storage key escapes storage root: {key}")
        return path

    def _path_for_ref(self, ref: str) -> Path:
        parsed = urlparse(ref)
        if parsed.scheme != "file":
            raise ValueError(f"Not a local storage reference: {ref}")
        path = Path(unquote(parsed.path)).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Reference outside storage root: {ref}")
        return path

    def make_ref(self, key: str) -> str:
        return self._path_for_key(key).as_uri()

    def exists(self, key: str) -> bool:
        """
        Check if an object exists in local storage.

        Args:
            key (str): The object key.

        Returns:
            bool: True if the file exists, False otherwise.
        """
        return self._path_for_key(key).is_file()

    def upload(self, data: bytes, key: str) -> str:
        path = self._path_for_key(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write then rename so a crash never leaves a truncated object
            tmp_path = path.with_name(f".{path.name}.part")
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as e:
            raise RuntimeError(f"Error saving file to local storage: {e}")
        logger.debug(f"Stored {len(data)} bytes at {path}")
        return path.as_uri()

    def download(self, ref: str) -> bytes:
        path = self._path_for_ref(ref)
        try:
            return path.read_bytes()
        except OSError as e:
            raise RuntimeError(f"Error reading {ref} from local storage: {e}")

    def delete(self, ref: str) -> None:
        path = self._path_for_ref(ref)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise RuntimeError(f"Error deleting {ref} from local storage: {e}")
