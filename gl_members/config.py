"""Loading of member declaration files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from gl_members.models import ConfigError, DesiredMember
from gl_members.normalizer import normalize_members


@dataclass
class Declaration:
    """A group and the members it should have."""

    group_id: str
    members: list[DesiredMember] = field(default_factory=list)


def load_declaration(path: str | Path) -> Declaration:
    """
    Load a YAML or JSON declaration file.

    Expected shape::

        group_id: myorg/team
        members:
          - id: 42
            access_level: developer
            expires_at: 2099-01-01
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read declaration file {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse declaration file {path}: {e}") from e

    return parse_declaration(data)


def parse_declaration(data: object) -> Declaration:
    if not isinstance(data, dict):
        raise ConfigError("Declaration must be a mapping with 'group_id' and 'members' keys")

    group_id = data.get("group_id")
    if group_id is None or str(group_id).strip() == "":
        raise ConfigError("Declaration is missing 'group_id'")

    members = data.get("members")
    if not isinstance(members, list):
        raise ConfigError("Declaration 'members' must be a list")

    return Declaration(group_id=str(group_id).strip(), members=normalize_members(members))
