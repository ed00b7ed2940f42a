"""Local persistence of the resource state."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from gl_members.models import ConfigError, ResourceState


class StateStore:
    """Reads and writes a ResourceState as a JSON document."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.logger = logging.getLogger("gl-members")

    def load(self) -> ResourceState:
        if not self.path.exists():
            self.logger.debug(f"No state file at {self.path}, starting from an absent resource")
            return ResourceState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"State file {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"State file {self.path} must contain a JSON object")
        return ResourceState.from_dict(data)

    def save(self, state: ResourceState) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(state.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
        tmp_path.replace(self.path)
        self.logger.debug(f"Wrote state to {self.path}")
