# -*- coding: utf-8 -*-
"""
Line sinks for collector output: console, file, and a tee that broadcasts
to several sinks at once.
"""

import os
import sys
from datetime import datetime
from typing import List, Optional, TextIO


class ConsoleSink:
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def write_line(self, text: str = ""):
        print(text, file=self.stream or sys.stdout)

    def close(self):
        pass


class FileSink:
    """Truncates the target on creation, then appends one line per call"""

    def __init__(self, path: str, bom: bool = False):
        self.path = path
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self._fh = open(path, "w", encoding="utf-8", errors="replace", newline="\n")
        if bom:
            self._fh.write("\ufeff")
        self._fh.flush()

    def write_line(self, text: str = ""):
        self._fh.write(text + "\n")
        self._fh.flush()

    def close(self):
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class TeeSink:
    def __init__(self, *sinks):
        self.sinks: List = list(sinks)

    def write_line(self, text: str = ""):
        for sink in self.sinks:
            sink.write_line(text)

    def write_block(self, text: str):
        for line in text.split("\n"):
            self.write_line(line)

    def close(self):
        for sink in self.sinks:
            sink.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class StepLog:
    """Timestamped, levelled narrative lines written to a sink"""

    def __init__(self, sink):
        self.sink = sink
        self.errors = 0
        self.warnings = 0

    def _write(self, level: str, message: str):
        self.sink.write_line(f"{datetime.now().isoformat()} - {level} - {message}")

    def info(self, message: str):
        self._write("INFO", message)

    def warning(self, message: str):
        self.warnings += 1
        self._write("WARNING", message)

    def error(self, message: str):
        self.errors += 1
        self._write("ERROR", message)
