"""On-disk instruction records for the gateway simulator."""

import os
from typing import Optional

from swish_client.shared.file_store import FileStore

KIND_FILES = {
    "paymentrequests": "paymentrequests.json",
    "refunds": "refunds.json",
}


class InstructionStore:

    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    def _path(self, kind: str) -> str:
        return os.path.join(self.data_dir, KIND_FILES[kind])

    def all(self, kind: str) -> dict:
        return FileStore.read_json(self._path(kind), default={})

    def get(self, kind: str, instruction_id: str) -> Optional[dict]:
        return self.all(kind).get(instruction_id)

    def insert(self, kind: str, record: dict) -> bool:
        return FileStore.insert_json_field(self._path(kind), record["id"], record)

    def save(self, kind: str, record: dict) -> None:
        FileStore.update_json_field(self._path(kind), record["id"], record)
