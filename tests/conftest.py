from typing import Dict, List

import pytest

from registry_reader import (
    RegistryKey,
    RegistryNotFoundError,
    RegistryValueSet,
    join_path,
)


class FakeRegistry:
    """In-memory registry with the same interface as WindowsRegistry"""

    def __init__(self):
        self.keys: Dict[str, dict] = {}
        self.children: Dict[str, List[str]] = {}
        self.failures: Dict[str, Exception] = {}
        self.reads: List[str] = []

    def add_key(self, path: str, **values) -> str:
        self.keys.setdefault(path, {}).update(values)
        self.children.setdefault(path, [])
        parent, _, name = path.rpartition("\\")
        if parent.count("\\") >= 1:
            self.add_key(parent)
            if name not in self.children[parent]:
                self.children[parent].append(name)
        return path

    def fail(self, path: str, error: Exception):
        self.failures[path] = error

    def _check(self, path: str):
        if path in self.failures:
            raise self.failures[path]
        if path not in self.keys:
            raise RegistryNotFoundError(path, "key does not exist")

    def key_exists(self, path: str) -> bool:
        return path in self.keys

    def read_values(self, path: str) -> RegistryValueSet:
        self.reads.append(path)
        self._check(path)
        return RegistryValueSet(source=path, values=dict(self.keys[path]))

    def list_children(self, path: str) -> List[RegistryKey]:
        self._check(path)
        return [RegistryKey(name=n, path=join_path(path, n)) for n in self.children[path]]


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()
