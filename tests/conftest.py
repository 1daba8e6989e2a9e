"""Shared fixtures: small RPG Maker MV project trees and a filesystem write spy."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import orjson
import pytest


def make_event(name: str, x: int, y: int, event_id: int = 0, commands: Optional[List[dict]] = None) -> Dict[str, Any]:
    """Build a map event with a single page."""
    return {
        "id": event_id,
        "name": name,
        "note": "",
        "pages": [{"list": list(commands or []) + [{"code": 0, "indent": 0, "parameters": []}]}],
        "x": x,
        "y": y,
    }


def make_map(width: int, height: int, events: List[Optional[dict]]) -> Dict[str, Any]:
    """Build a map document; events are stored last, as the editor does."""
    return {
        "autoplayBgm": False,
        "data": [0] * (width * height),
        "displayName": "",
        "height": height,
        "width": width,
        "events": events,
    }


def transfer(map_id: int, designation: int = 0) -> Dict[str, Any]:
    """Build a Transfer Player command."""
    return {"code": 201, "indent": 0, "parameters": [designation, map_id, 5, 5, 0, 0]}


def map_info(map_id: int, name: str, parent_id: int = 0) -> Dict[str, Any]:
    """Build a MapInfos entry."""
    return {
        "id": map_id,
        "expanded": True,
        "name": name,
        "order": map_id,
        "parentId": parent_id,
        "scrollX": 1104.5,
        "scrollY": 624,
    }


class ProjectBuilder:
    """Writes documents into a temporary project's data directory."""

    def __init__(self, root: Path):
        self.root = root
        self.data = root / "data"
        self.data.mkdir(parents=True, exist_ok=True)

    def write(self, filename: str, document: Any) -> Path:
        path = self.data / filename
        path.write_bytes(orjson.dumps(document))
        return path

    def write_map(self, map_id: int, document: Any) -> Path:
        return self.write(f"Map{map_id:03d}.json", document)

    def write_index(self, entries: List[dict], length: Optional[int] = None) -> Path:
        size = length or (max(entry["id"] for entry in entries) + 1)
        table: List[Optional[dict]] = [None] * size
        for entry in entries:
            table[entry["id"]] = entry
        return self.write("MapInfos.json", table)

    def read(self, filename: str) -> Any:
        return orjson.loads((self.data / filename).read_bytes())

    def read_map(self, map_id: int) -> Any:
        return self.read(f"Map{map_id:03d}.json")


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """An empty project with a data directory."""
    return ProjectBuilder(tmp_path / "project")


class WriteSpy:
    """Records every filesystem mutation made through pathlib."""

    def __init__(self):
        self.calls: List[tuple] = []

    @property
    def count(self) -> int:
        return len(self.calls)


@pytest.fixture
def write_spy(monkeypatch: pytest.MonkeyPatch) -> WriteSpy:
    """Spy on pathlib writes, renames and deletions while still performing them."""
    spy = WriteSpy()

    def wrap(name: str) -> Callable:
        original = getattr(Path, name)

        def spied(self: Path, *args: Any, **kwargs: Any) -> Any:
            spy.calls.append((name, self))
            return original(self, *args, **kwargs)

        return spied

    for name in ("write_bytes", "write_text", "rename", "replace", "unlink"):
        monkeypatch.setattr(Path, name, wrap(name))
    return spy


@pytest.fixture(autouse=True)
def close_log_handlers():
    """Drop console and file handlers installed by setup_logging during a test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            handler.close()
            root.removeHandler(handler)
