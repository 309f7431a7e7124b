from __future__ import annotations

from pathlib import Path

from adventure.assets.registry import GameManifest, load_game_manifest


_MANIFEST: GameManifest | None = None


def init_manifest(*, project_root: Path) -> GameManifest:
    """Load the manifest once and cache it.

    Safe to call multiple times; subsequent calls return the already loaded instance.
    """

    global _MANIFEST
    if _MANIFEST is None:
        _MANIFEST = load_game_manifest(root=project_root)
    return _MANIFEST


def reset_manifest_for_tests() -> None:
    global _MANIFEST
    _MANIFEST = None


def get_manifest() -> GameManifest:
    if _MANIFEST is None:
        raise RuntimeError("Manifest not initialized. Call init_manifest() at startup.")
    return _MANIFEST
