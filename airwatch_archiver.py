# -*- coding: utf-8 -*-
"""
airwatch_archiver.py

Copies each Airwatch installation folder to a timestamped staging folder,
zips the staging folder and removes it again. Every step is written to the
archival log. The source folders are only ever read.
"""

import os
import shutil
import zipfile
from typing import List, Sequence, Tuple

PENDING = "pending"
SOURCE_CHECKED = "source_checked"
SKIPPED = "skipped"
COPYING = "copying"
COPIED = "copied"
COMPRESSING = "compressing"
COMPRESSED = "compressed"
CLEANING_UP = "cleaning_up"
DONE = "done"
FAILED = "failed"


class ArchiveJob:
    def __init__(self, label: str, source: str, destination: str, timestamp: str):
        self.label = label
        self.source = source
        self.staging = os.path.join(destination, f"{label}_{timestamp}")
        self.archive = os.path.join(destination, f"{label}_{timestamp}.zip")
        self.state = PENDING
        self.error = None

    def __repr__(self):
        return f"ArchiveJob({self.label!r}, state={self.state!r})"


def zip_directory(directory: str, archive_path: str) -> int:
    """
    Zip `directory` into `archive_path`, rooting entries at the directory's
    own name. An existing archive is updated: entries with the same name are
    replaced, all other entries are kept.
    """
    root_name = os.path.basename(os.path.normpath(directory))
    parent = os.path.dirname(os.path.normpath(directory))

    files = []
    for root, dirs, names in os.walk(directory):
        dirs.sort()
        for name in sorted(names):
            full = os.path.join(root, name)
            arcname = os.path.relpath(full, parent).replace(os.sep, "/")
            files.append((full, arcname))
    new_names = {arcname for _, arcname in files}

    tmp_path = archive_path + ".tmp"
    try:
        with zipfile.ZipFile(tmp_path, "w", compression=zipfile.ZIP_DEFLATED,
                             strict_timestamps=False) as zf:
            if os.path.exists(archive_path):
                with zipfile.ZipFile(archive_path, "r") as old:
                    for info in old.infolist():
                        if info.filename not in new_names:
                            zf.writestr(info, old.read(info.filename))
            for full, arcname in files:
                zf.write(full, arcname=arcname)
            if not files:
                zf.writestr(root_name + "/", b"")
        os.replace(tmp_path, archive_path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
    return len(files)


class FolderArchiver:
    def __init__(self, sources: Sequence[Tuple[str, str]], destination: str, timestamp: str, log):
        self.destination = destination
        self.log = log
        self.jobs: List[ArchiveJob] = [
            ArchiveJob(label, source, destination, timestamp) for label, source in sources
        ]

    def run(self) -> List[ArchiveJob]:
        os.makedirs(self.destination, exist_ok=True)
        self.log.info(f"Archiving Airwatch folders to {self.destination}")
        for job in self.jobs:
            try:
                self._run_job(job)
            except Exception as e:
                job.state = FAILED
                job.error = e
                self.log.error(f"{job.label}: failed archiving {job.source}: {e}")
                self._discard_staging(job)
        self.log.info("Archiving finished")
        return self.jobs

    def _run_job(self, job: ArchiveJob):
        self.log.info(f"{job.label}: checking for {job.source}")
        exists = os.path.isdir(job.source)
        job.state = SOURCE_CHECKED
        if not exists:
            job.state = SKIPPED
            self.log.warning(f"{job.label}: folder not found: {job.source}")
            return

        job.state = COPYING
        self.log.info(f"{job.label}: copying {job.source} to {job.staging}")
        shutil.copytree(job.source, job.staging, dirs_exist_ok=True)
        job.state = COPIED
        self.log.info(f"{job.label}: copy complete")

        job.state = COMPRESSING
        self.log.info(f"{job.label}: compressing {job.staging} to {job.archive}")
        count = zip_directory(job.staging, job.archive)
        job.state = COMPRESSED
        self.log.info(f"{job.label}: compressed {count} files into {job.archive}")

        job.state = CLEANING_UP
        self.log.info(f"{job.label}: removing {job.staging}")
        shutil.rmtree(job.staging)
        job.state = DONE
        self.log.info(f"{job.label}: done")

    def _discard_staging(self, job: ArchiveJob):
        if not os.path.isdir(job.staging):
            return
        try:
            shutil.rmtree(job.staging)
            self.log.info(f"{job.label}: removed staging folder {job.staging}")
        except OSError as e:
            self.log.error(f"{job.label}: could not remove staging folder {job.staging}: {e}")
