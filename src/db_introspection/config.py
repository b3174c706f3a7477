from __future__ import annotations

import dataclasses
import pathlib
from typing import Any, Dict, List, Optional

import yaml

from .settings import Settings


@dataclasses.dataclass
class ConnectorProfile:
    id: str
    engine: str
    sqlalchemy_url: str
    statement_timeout_ms: int = 30000
    exclude_schemas: List[str] = dataclasses.field(default_factory=list)


def _to_profile(raw: Dict[str, Any], settings: Settings) -> ConnectorProfile:
    return ConnectorProfile(
        id=raw["id"],
        engine=raw["engine"],
        sqlalchemy_url=raw["sqlalchemy_url"],
        statement_timeout_ms=int(raw.get("statement_timeout_ms", settings.statement_timeout_ms)),
        exclude_schemas=list(raw.get("exclude_schemas") or []),
    )


def load_profiles(
    path: Optional[pathlib.Path] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, ConnectorProfile]:
    """
    Load connector profiles from a YAML file. Returns a dict keyed by profile id.

    The path defaults to Settings.profiles_path.
    """
    settings = settings or Settings()
    path = pathlib.Path(path or settings.profiles_path)
    if not path.exists():
        raise FileNotFoundError(f"Connector profile config not found: {path}")

    raw = yaml.safe_load(path.read_text())
    if not isinstance(raw, list):
        raise ValueError("Connector profile config must be a YAML list of profiles")

    profiles: Dict[str, ConnectorProfile] = {}
    for item in raw:
        profile = _to_profile(item, settings)
        profiles[profile.id] = profile
    return profiles


def get_profile(profiles: Dict[str, ConnectorProfile], profile_id: str) -> ConnectorProfile:
    try:
        return profiles[profile_id]
    except KeyError as exc:
        raise KeyError(f"Connector profile '{profile_id}' not found") from exc
