from __future__ import annotations

from pathlib import Path

from adventure.assets.singleton import init_manifest
from adventure.challenges import default_registry


def init_manifest_for_app() -> None:
    # project root is two levels up from this file: adventure/assets/startup.py
    project_root = Path(__file__).resolve().parents[2]
    manifest = init_manifest(project_root=project_root)

    # Every advertised game must have a challenge module behind it.
    default_registry().validate_ids(manifest.game_ids())
