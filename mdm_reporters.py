# -*- coding: utf-8 -*-
"""
mdm_reporters.py

Registry reporters for logon and MDM enrollment state. Each reporter reads
one fixed key and returns its section of the report as text.
"""

from typing import Any, List

from registry_reader import RegistryError, RegistryValueSet, key_name

LOGONUI_FIELDS = (
    "LastLoggedOnUser",
    "LastLoggedOnUserSID",
    "LastLoggedOnDisplayName",
    "LastLoggedOnSAMUser",
)

NO_SUBKEYS = "[No subkeys found]"
NO_ENROLLMENTS = "[No enrollments found]"


def format_value(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if value is None:
        return ""
    return str(value)


def field_line(name: str, value: Any) -> str:
    return f"{name}: {format_value(value)}"


def has_upn(values: RegistryValueSet) -> bool:
    upn = values.get("UPN")
    return upn is not None and format_value(upn).strip() != ""


class LogonUIReporter:
    title = "=== LOGONUI (LAST LOGGED ON USER) ==="

    def __init__(self, registry, path: str):
        self.registry = registry
        self.path = path

    def report(self) -> str:
        # a missing key propagates; the driver records it for this section
        values = self.registry.read_values(self.path)
        lines = [self.title]
        lines.append(field_line("Source", values.source))
        lines.append(field_line("KeyName", key_name(values.source)))
        for name in LOGONUI_FIELDS:
            if name in values:
                lines.append(field_line(name, values.get(name)))
        return "\n".join(lines)


class OmadmEnrollmentReporter:
    title = "=== OMADM ACCOUNTS ==="

    def __init__(self, registry, path: str):
        self.registry = registry
        self.path = path

    def report(self) -> str:
        lines = [self.title]
        if not self.registry.key_exists(self.path):
            lines.append(NO_SUBKEYS)
            return "\n".join(lines)

        children = self.registry.list_children(self.path)
        if not children:
            lines.append(NO_SUBKEYS)
            return "\n".join(lines)

        for child in children:
            lines.append("")
            lines.append(field_line("Source", self.path))
            lines.append(field_line("Enrollment GUID", child.name))
        return "\n".join(lines)


class UpnEnrollmentReporter:
    """
    Reports the first enrollment under the Enrollments key carrying a UPN.
    Placeholder enrollments have no UPN; scanning stops at the first real one.
    """

    title = "=== ENROLLMENTS (UPN) ==="

    def __init__(self, registry, path: str):
        self.registry = registry
        self.path = path

    def report(self) -> str:
        lines = [self.title]
        try:
            if self.registry.key_exists(self.path):
                for child in self.registry.list_children(self.path):
                    try:
                        values = self.registry.read_values(child.path)
                    except RegistryError as e:
                        lines.append(f"[!] Error reading {child.path}: {e}")
                        continue
                    if not has_upn(values):
                        continue
                    lines.append(field_line("Source", self.path))
                    for name, value in values.values.items():
                        lines.append(field_line(name, value))
                    lines.append(field_line("Enrollment GUID", child.name))
                    return "\n".join(lines)
            lines.append(NO_ENROLLMENTS)
        except Exception as e:
            lines.append(f"[!] Error reading enrollments under {self.path}: {e}")
        return "\n".join(lines)


class ProfileListReporter:
    title = "=== PROFILE LIST ==="

    def __init__(self, registry, path: str):
        self.registry = registry
        self.path = path

    def report(self) -> str:
        lines = [self.title]
        if not self.registry.key_exists(self.path):
            lines.append(NO_SUBKEYS)
            return "\n".join(lines)

        children = self.registry.list_children(self.path)
        if not children:
            lines.append(NO_SUBKEYS)
            return "\n".join(lines)

        lines.append(field_line("Source", self.path))
        for child in children:
            lines.append("")
            lines.append(field_line("SID", child.name))
            try:
                values = self.registry.read_values(child.path)
                lines.append(field_line("ProfileImagePath", values.get("ProfileImagePath")))
            except RegistryError as e:
                lines.append(f"[!] Error reading {child.path}: {e}")
        return "\n".join(lines)


def build_reporters(registry, settings) -> List:
    return [
        ("LogonUI", LogonUIReporter(registry, settings.logonui_path)),
        ("OMADM Accounts", OmadmEnrollmentReporter(registry, settings.omadm_accounts_path)),
        ("Enrollments", UpnEnrollmentReporter(registry, settings.enrollments_path)),
        ("Profile List", ProfileListReporter(registry, settings.profile_list_path)),
    ]
