"""
Storage backends.

A repository persists its state as a handful of flat key-value namespaces
(objects, branches, staging, head slots) and reads and writes plain files
in a working tree. Both concerns sit behind small abstract classes so the
core can run against real directories or against dictionaries in memory.
"""
import os
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote, unquote

from loguru import logger

from . import types

IGNORED_NAMES = ('.mgit', '.git', 'venv', '__pycache__', '.idea', '.pytest_cache')


def is_ignored(path: types.Path) -> bool:
    parts = path.replace('\\', '/').split('/')
    return any(name in parts for name in IGNORED_NAMES)


class Storage(ABC):
    """Key-value namespaces holding everything a repository persists."""

    @abstractmethod
    def exists(self) -> bool: ...

    @abstractmethod
    def create(self) -> None: ...

    @abstractmethod
    def get(self, namespace: str, key: str) -> Optional[bytes]: ...

    @abstractmethod
    def put(self, namespace: str, key: str, value: bytes) -> None: ...

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None: ...

    @abstractmethod
    def keys(self, namespace: str) -> list[str]:
        """Sorted keys of a namespace."""

    def contains(self, namespace: str, key: str) -> bool:
        return self.get(namespace, key) is not None


class DirectoryStorage(Storage):
    """One directory per namespace, one file per key."""

    def __init__(self, git_dir: str):
        self.git_dir = git_dir

    def _dir(self, namespace):
        return os.path.join(self.git_dir, *namespace.split('/'))

    def _path(self, namespace, key):
        # keys may hold '/' (staged paths, branch names); the namespace stays flat
        return os.path.join(self._dir(namespace), quote(key, safe=''))

    def exists(self):
        return os.path.isdir(self.git_dir)

    def create(self):
        os.makedirs(self.git_dir, exist_ok=True)

    def get(self, namespace, key):
        try:
            with open(self._path(namespace, key), 'rb') as f:
                return f.read()
        except FileNotFoundError:
            return None

    def put(self, namespace, key, value):
        os.makedirs(self._dir(namespace), exist_ok=True)
        with open(self._path(namespace, key), 'wb') as f:
            f.write(value)

    def delete(self, namespace, key):
        try:
            os.remove(self._path(namespace, key))
        except FileNotFoundError:
            pass

    def keys(self, namespace):
        directory = self._dir(namespace)
        if not os.path.isdir(directory):
            return []
        return sorted(unquote(name) for name in os.listdir(directory)
                      if os.path.isfile(os.path.join(directory, name)))


class MemoryStorage(Storage):
    def __init__(self):
        self.namespaces: Optional[dict[str, dict[str, bytes]]] = None

    def exists(self):
        return self.namespaces is not None

    def create(self):
        if self.namespaces is None:
            self.namespaces = {}

    def _namespace(self, namespace) -> dict[str, bytes]:
        assert self.namespaces is not None, 'Storage was never created'
        return self.namespaces.setdefault(namespace, {})

    def get(self, namespace, key):
        return self._namespace(namespace).get(key)

    def put(self, namespace, key, value):
        self._namespace(namespace)[key] = bytes(value)

    def delete(self, namespace, key):
        self._namespace(namespace).pop(key, None)

    def keys(self, namespace):
        return sorted(self._namespace(namespace))


class WorkTree(ABC):
    """The user's files, addressed by '/'-separated relative paths."""

    @abstractmethod
    def read(self, path: types.Path) -> Optional[bytes]: ...

    @abstractmethod
    def write(self, path: types.Path, data: bytes) -> None: ...

    @abstractmethod
    def delete(self, path: types.Path) -> None: ...

    @abstractmethod
    def list_files(self) -> list[types.Path]: ...

    def exists(self, path: types.Path) -> bool:
        return self.read(path) is not None


class DirectoryWorkTree(WorkTree):
    def __init__(self, root: str):
        self.root = root

    def _path(self, path):
        return os.path.join(self.root, *path.split('/'))

    def read(self, path):
        full_path = self._path(path)
        if not os.path.isfile(full_path):
            return None
        with open(full_path, 'rb') as f:
            return f.read()

    def write(self, path, data):
        full_path = self._path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, 'wb') as f:
            f.write(data)

    def delete(self, path):
        full_path = self._path(path)
        if not os.path.isfile(full_path):
            return
        os.remove(full_path)
        logger.debug('Deleted working file {}', path)
        directory = os.path.dirname(full_path)
        root = os.path.abspath(self.root)
        while os.path.abspath(directory) != root:
            try:
                os.rmdir(directory)
            except OSError:
                break  # not empty
            directory = os.path.dirname(directory)

    def list_files(self):
        result = []
        for root, dirnames, filenames in os.walk(self.root):
            rel_root = os.path.relpath(root, self.root)
            dirnames[:] = [d for d in dirnames
                           if not is_ignored(os.path.join(rel_root, d))]
            for filename in filenames:
                path = os.path.normpath(os.path.join(rel_root, filename)).replace('\\', '/')  # window fix
                if is_ignored(path) or not os.path.isfile(self._path(path)):
                    continue
                result.append(path)
        return sorted(result)


class MemoryWorkTree(WorkTree):
    def __init__(self, files: Optional[dict[types.Path, bytes]] = None):
        self.files: dict[types.Path, bytes] = dict(files or {})

    def read(self, path):
        return self.files.get(path)

    def write(self, path, data):
        self.files[path] = bytes(data)

    def delete(self, path):
        self.files.pop(path, None)

    def list_files(self):
        return sorted(path for path in self.files if not is_ignored(path))
