#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
registry_reader.py

Path-addressed access to the Windows registry.
Uses only Python stdlib (winreg), imported when a reader is created so the
rest of the collector can be imported and tested on any platform.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


# ----------------- Errors -----------------
class RegistryError(Exception):
    """Base class for registry read failures"""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(f"{path}: {message}" if message else path)


class RegistryNotFoundError(RegistryError):
    pass


class RegistryAccessError(RegistryError):
    pass


# ----------------- Snapshots -----------------
@dataclass(frozen=True)
class RegistryValueSet:
    source: str
    values: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def __contains__(self, name: str) -> bool:
        return name in self.values


@dataclass(frozen=True)
class RegistryKey:
    name: str
    path: str


def join_path(parent: str, child: str) -> str:
    return parent.rstrip("\\") + "\\" + child


def key_name(path: str) -> str:
    return path.rstrip("\\").rsplit("\\", 1)[-1]


# ----------------- Path parsing -----------------
HIVE_ALIASES = {
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKCU": "HKEY_CURRENT_USER",
    "HKU": "HKEY_USERS",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKCC": "HKEY_CURRENT_CONFIG",
}


def split_hive(path: str) -> Tuple[str, str]:
    """Split 'HKLM\\SOFTWARE\\X' (or 'HKLM:\\...', 'HKEY_LOCAL_MACHINE\\...')
    into ('HKEY_LOCAL_MACHINE', 'SOFTWARE\\X')"""
    head, _, rest = path.replace("/", "\\").partition("\\")
    hive = head.rstrip(":").upper()
    hive = HIVE_ALIASES.get(hive, hive)
    if hive not in HIVE_ALIASES.values():
        raise RegistryNotFoundError(path, f"unknown hive '{head}'")
    return hive, rest.strip("\\")


# ----------------- winreg reader -----------------
class WindowsRegistry:
    def __init__(self):
        import winreg
        self._winreg = winreg
        self._access = winreg.KEY_READ | winreg.KEY_WOW64_64KEY

    def _open(self, path: str):
        hive, subkey = split_hive(path)
        root = getattr(self._winreg, hive)
        try:
            return self._winreg.OpenKey(root, subkey, 0, self._access)
        except FileNotFoundError as e:
            raise RegistryNotFoundError(path, "key does not exist") from e
        except PermissionError as e:
            raise RegistryAccessError(path, "access denied") from e

    def key_exists(self, path: str) -> bool:
        try:
            with self._open(path):
                return True
        except RegistryNotFoundError:
            return False

    def read_values(self, path: str) -> RegistryValueSet:
        values = {}
        with self._open(path) as key:
            i = 0
            while True:
                try:
                    name, value, _ = self._winreg.EnumValue(key, i)
                except OSError:
                    break
                i += 1
                # unnamed "(Default)" value
                values[name or "(default)"] = value
        return RegistryValueSet(source=path, values=values)

    def list_children(self, path: str) -> List[RegistryKey]:
        children = []
        with self._open(path) as key:
            i = 0
            while True:
                try:
                    name = self._winreg.EnumKey(key, i)
                except OSError:
                    break
                i += 1
                children.append(RegistryKey(name=name, path=join_path(path, name)))
        return children
