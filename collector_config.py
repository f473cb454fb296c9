#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
collector_config.py

Configuration for the MDM diagnostic collector.
The collector runs with fixed defaults; an optional config file in the
working directory can override the output directory, the registry paths
read by each reporter and the Airwatch folders that get archived.
"""

import copy
import json
import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

CONFIG_FILENAME = "mdm_collector_config.txt"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# ----------------- Default Configuration -----------------
DEFAULT_CONFIG = {
    "output_directory": None,  # None = current directory

    "registry": {
        "logonui": r"HKLM\SOFTWARE\Microsoft\Windows\CurrentVersion\Authentication\LogonUI",
        "omadm_accounts": r"HKLM\SOFTWARE\Microsoft\Provisioning\OMADM\Accounts",
        "enrollments": r"HKLM\SOFTWARE\Microsoft\Enrollments",
        "profile_list": r"HKLM\SOFTWARE\Microsoft\Windows NT\CurrentVersion\ProfileList",
    },

    # label -> folder; archived in this order
    "archive": {
        "Airwatch": r"C:\ProgramData\Airwatch",
        "Airwatchx86": r"C:\Program Files (x86)\Airwatch",
    },
}

NESTED_SECTIONS = ("registry", "archive")


# ----------------- Configuration Manager -----------------
class ConfigManager:
    def __init__(self, config_path: str = CONFIG_FILENAME):
        self.config_path = config_path
        self.config = copy.deepcopy(DEFAULT_CONFIG)

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file, falling back to defaults"""
        if not os.path.exists(self.config_path):
            return self.config

        try:
            with open(self.config_path, 'r', encoding='utf-8-sig') as f:
                file_content = f.read().strip()

            if file_content.startswith('{'):
                loaded_config = json.loads(file_content)
            else:
                loaded_config = self._parse_simple_config(file_content)

            self._deep_merge(self.config, loaded_config)
            print(f"[+] Configuration loaded from {self.config_path}")

        except (OSError, ValueError) as e:
            print(f"[!] Error loading config: {e}, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)

        return self.config

    def _parse_simple_config(self, content: str) -> Dict[str, Any]:
        """Parse simple key=value config format"""
        config: Dict[str, Any] = {}

        for line in content.split('\n'):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip() or None

            # registry.logonui=..., archive.Airwatch=...
            section, dot, sub_key = key.partition('.')
            if dot and section in NESTED_SECTIONS:
                config.setdefault(section, {})[sub_key] = value
            else:
                config[key] = value

        return config

    def _deep_merge(self, target: Dict, source: Dict):
        """Recursively merge source dict into target dict"""
        for key, value in source.items():
            if (key in target and isinstance(target[key], dict)
                    and isinstance(value, dict)):
                self._deep_merge(target[key], value)
            else:
                target[key] = value


# ----------------- Utilities -----------------
def now_ts(moment: Optional[datetime] = None) -> str:
    return (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)


def safe_filename(name: str, maxlen: int = 200) -> str:
    if not name:
        return "noname"
    name = str(name)
    name = re.sub(r'[\\/:"*?<>|]+', '_', name)
    name = re.sub(r'[\x00-\x1f]+', '_', name).strip()
    if len(name) > maxlen:
        name = name[:maxlen]
    return name or "file"


# ----------------- Run settings -----------------
@dataclass(frozen=True)
class CollectorSettings:
    output_directory: str
    timestamp: str
    logonui_path: str
    omadm_accounts_path: str
    enrollments_path: str
    profile_list_path: str
    archive_sources: Tuple[Tuple[str, str], ...]

    @classmethod
    def from_config(cls, config: Dict[str, Any], timestamp: Optional[str] = None) -> "CollectorSettings":
        registry = config["registry"]
        sources: List[Tuple[str, str]] = [
            (label, folder) for label, folder in config["archive"].items() if folder
        ]
        return cls(
            output_directory=config.get("output_directory") or os.getcwd(),
            timestamp=timestamp or now_ts(),
            logonui_path=registry["logonui"],
            omadm_accounts_path=registry["omadm_accounts"],
            enrollments_path=registry["enrollments"],
            profile_list_path=registry["profile_list"],
            archive_sources=tuple(sources),
        )

    def report_path(self, hostname: str) -> str:
        name = f"RegInfo_{safe_filename(hostname)}_{self.timestamp}.txt"
        return os.path.join(self.output_directory, name)

    def archive_log_path(self) -> str:
        return os.path.join(self.output_directory, f"Zip-AWFolders-{self.timestamp}.txt")
