"""Atomic, file-locked JSON storage used by the gateway simulator."""

import json
import os
import tempfile
from typing import Any

from filelock import FileLock


class FileStore:

    @staticmethod
    def _lock_path(file_path: str) -> str:
        return f"{file_path}.lock"

    @staticmethod
    def _write_atomic(file_path: str, data: Any) -> None:
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=os.path.dirname(file_path), suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(tmp, file_path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    @staticmethod
    def read_json(file_path: str, default: Any = None) -> Any:
        lock = FileLock(FileStore._lock_path(file_path))
        with lock:
            if not os.path.exists(file_path):
                return default if default is not None else {}
            with open(file_path, "r") as f:
                return json.load(f)

    @staticmethod
    def update_json_field(file_path: str, key: str, value: Any) -> None:
        lock = FileLock(FileStore._lock_path(file_path))
        with lock:
            data = {}
            if os.path.exists(file_path):
                with open(file_path, "r") as f:
                    data = json.load(f)
            data[key] = value
            FileStore._write_atomic(file_path, data)

    @staticmethod
    def insert_json_field(file_path: str, key: str, value: Any) -> bool:
        """Store ``value`` under ``key`` unless the key already exists.

        Returns False when the key was taken, leaving the file untouched.
        """
        lock = FileLock(FileStore._lock_path(file_path))
        with lock:
            data = {}
            if os.path.exists(file_path):
                with open(file_path, "r") as f:
                    data = json.load(f)
            if key in data:
                return False
            data[key] = value
            FileStore._write_atomic(file_path, data)
            return True
