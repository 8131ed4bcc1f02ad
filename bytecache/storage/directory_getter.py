"""
Loader that reads source values from files under a root directory.
"""

import logging
import os

from bytecache.api.errors import SourceNotFound, SourceUnavailable

logger = logging.getLogger(__name__)


class DirectoryGetter:
    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def _path_for(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        # keys must stay inside root: no "../" or absolute paths
        if os.path.commonpath([self.root, path]) != self.root or path == self.root:
            raise SourceNotFound("key resolves outside the source directory", key=key)
        return path

    def _read_file(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def get(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return self._read_file(path)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise SourceNotFound("no such file in source directory", key=key) from e
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise SourceUnavailable(f"cannot read source file: {e}", key=key) from e

    def __repr__(self):
        return f"DirectoryGetter({self.root!r})"
