#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
collect_mdm_info.py

MDM (Workspace ONE / Airwatch) diagnostic collector.
Writes logon, OMADM, enrollment and profile registry state to
RegInfo_<host>_<timestamp>.txt (echoed to the console), then zips the
Airwatch installation folders for offline troubleshooting.
Takes no arguments; defaults can be overridden in mdm_collector_config.txt.
"""

import os
import platform
import socket
import subprocess
from datetime import datetime
from typing import Callable, List, Optional

from airwatch_archiver import DONE, FAILED, SKIPPED, FolderArchiver
from collector_config import CONFIG_FILENAME, CollectorSettings, ConfigManager
from mdm_reporters import build_reporters
from output_sinks import ConsoleSink, FileSink, StepLog, TeeSink
from registry_reader import WindowsRegistry

SERIAL_COMMAND = [
    "powershell", "-NoProfile", "-NonInteractive", "-Command",
    "(Get-CimInstance -ClassName Win32_BIOS).SerialNumber",
]


# ----------------- Header -----------------
def get_hostname() -> str:
    return os.environ.get("COMPUTERNAME") or socket.gethostname()


def get_serial_number() -> str:
    try:
        result = subprocess.run(
            SERIAL_COMMAND,
            capture_output=True,
            text=True,
            timeout=60,
        )
    except (OSError, subprocess.SubprocessError) as e:
        print(f"[!] Serial number query failed: {e}")
        return "Unknown"
    serial = result.stdout.strip()
    if result.returncode != 0 or not serial:
        return "Unknown"
    return serial


def build_header(hostname: str, serial: str, moment: datetime) -> str:
    lines = ["=== MDM DIAGNOSTIC REPORT ==="]
    lines.append(f"Hostname: {hostname}")
    lines.append(f"Serial Number: {serial}")
    lines.append(f"Timestamp: {moment.strftime('%Y-%m-%d %H:%M:%S')}")
    return "\n".join(lines)


# ----------------- Collection -----------------
class RunResult:
    def __init__(self, report_path: str, archive_log_path: str):
        self.report_path = report_path
        self.archive_log_path = archive_log_path
        self.failed_sections: List[str] = []
        self.failed_routines: List[str] = []
        self.jobs: List = []
        self.archive_warnings = 0
        self.archive_errors = 0

    @property
    def files_created(self) -> List[str]:
        files = [self.report_path, self.archive_log_path]
        files.extend(job.archive for job in self.jobs if job.state == DONE)
        return [path for path in files if os.path.exists(path)]


def write_report(settings: CollectorSettings, registry, hostname: str, serial: str,
                 moment: datetime, result: RunResult, console=None):
    with TeeSink(console or ConsoleSink(), FileSink(result.report_path, bom=True)) as out:
        out.write_block(build_header(hostname, serial, moment))
        for name, reporter in build_reporters(registry, settings):
            out.write_line("")
            print(f"[+] Collecting {name}...")
            try:
                out.write_block(reporter.report())
            except Exception as e:
                result.failed_sections.append(name)
                out.write_line(f"[!] Error in {name}: {e}")


def archive_folders(settings: CollectorSettings, result: RunResult, console=None):
    with TeeSink(console or ConsoleSink(), FileSink(result.archive_log_path)) as sink:
        log = StepLog(sink)
        archiver = FolderArchiver(
            settings.archive_sources,
            settings.output_directory,
            settings.timestamp,
            log,
        )
        result.jobs = archiver.run()
        result.archive_warnings = log.warnings
        result.archive_errors = log.errors


def run_collection(settings: CollectorSettings, registry,
                   hostname: Optional[str] = None,
                   serial_lookup: Callable[[], str] = get_serial_number,
                   moment: Optional[datetime] = None,
                   console=None) -> RunResult:
    hostname = hostname or get_hostname()
    moment = moment or datetime.now()

    result = RunResult(settings.report_path(hostname), settings.archive_log_path())
    print(f"[+] Output directory: {settings.output_directory}")
    print(f"[+] Collection started at {moment}")
    try:
        os.makedirs(settings.output_directory, exist_ok=True)
    except OSError as e:
        print(f"[!] Cannot create output directory {settings.output_directory}: {e}")

    try:
        write_report(settings, registry, hostname, serial_lookup(), moment, result, console)
    except Exception as e:
        result.failed_routines.append("Registry Report")
        print(f"[!] Error in Registry Report: {e}")

    print("[+] Archiving Airwatch folders...")
    try:
        archive_folders(settings, result, console)
    except Exception as e:
        result.failed_routines.append("Folder Archive")
        print(f"[!] Error in Folder Archive: {e}")
    return result


def print_summary(result: RunResult):
    print(f"\n[+] Collection completed at {datetime.now()}")
    print(f"[+] Files created: {len(result.files_created)}")
    for path in result.files_created:
        print(f"  {path}")
    for job in result.jobs:
        if job.state == SKIPPED:
            print(f"[!] {job.label}: folder not found, nothing archived")
        elif job.state == FAILED:
            print(f"[!] {job.label}: archiving failed: {job.error}")
    if result.archive_warnings or result.archive_errors:
        print(f"[!] Archiving: {result.archive_warnings} warnings, {result.archive_errors} errors")
    if result.failed_sections:
        print(f"[!] Sections with errors: {', '.join(result.failed_sections)}")
    if result.failed_routines:
        print(f"[!] Steps that did not complete: {', '.join(result.failed_routines)}")
    print(f"[+] Report: {result.report_path}")
    print(f"[+] Archive log: {result.archive_log_path}")


# ----------------- Main Execution -----------------
def main() -> int:
    if platform.system().lower() != "windows":
        print("This script only runs on Windows. Exiting.")
        return 0

    config = ConfigManager(CONFIG_FILENAME).load_config()
    settings = CollectorSettings.from_config(config)
    result = run_collection(settings, WindowsRegistry())
    print_summary(result)
    print("\n[!] Note: Some registry keys might require administrator privileges")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
