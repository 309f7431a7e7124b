from __future__ import annotations

import csv
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from adventure.api.models import CharacterInfo, GameInfo, Manifest, ThemeInfo
from adventure.node_graph import is_known_layout

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "winding"


def _slug_id(s: str) -> str:
    s = s.strip().casefold()
    s = re.sub(r"[^a-z0-9]+", "_", s)
    return s.strip("_")


class ManifestLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class GameManifest:
    """Themes, characters and challenge games offered to the player.

    IDs are canonical (persisted in sessions, sent on the wire). Names are for display.
    """

    themes: tuple[ThemeInfo, ...]
    characters: tuple[CharacterInfo, ...]
    games: tuple[GameInfo, ...]

    def theme(self, theme_id: str) -> ThemeInfo | None:
        return next((t for t in self.themes if t.id == theme_id), None)

    def character(self, character_id: str) -> CharacterInfo | None:
        return next((c for c in self.characters if c.id == character_id), None)

    def layout_for(self, theme_id: str) -> str:
        theme = self.theme(theme_id)
        return theme.type if theme is not None else DEFAULT_LAYOUT

    def game_ids(self) -> tuple[str, ...]:
        return tuple(g.id for g in self.games)

    def to_model(self) -> Manifest:
        return Manifest(themes=list(self.themes), characters=list(self.characters), games=list(self.games))


def _check_unique(kind: str, ids: list[str]) -> None:
    seen: set[str] = set()
    for i in ids:
        if i in seen:
            raise ManifestLoadError(f"Duplicate {kind} id: {i}")
        seen.add(i)


def _read_csv(path: Path, *, header: list[str]) -> list[dict[str, str]]:
    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            rows = [[c.strip() for c in row] for row in csv.reader(f)]
    except FileNotFoundError as e:
        raise ManifestLoadError(f"Manifest file not found: {path}") from e
    except csv.Error as e:
        raise ManifestLoadError(f"Malformed manifest CSV {path}: {e}") from e

    rows = [row for row in rows if any(row)]
    if not rows:
        raise ManifestLoadError(f"Empty manifest CSV: {path}")

    got = [c.casefold() for c in rows[0]]
    if got[: len(header)] != header:
        raise ManifestLoadError(f"Unexpected header in {path}: {rows[0]}")

    out: list[dict[str, str]] = []
    for row in rows[1:]:
        if len(row) < len(header):
            continue
        out.append(dict(zip(header, row)))
    return out


def load_themes_csv(path: Path) -> tuple[ThemeInfo, ...]:
    themes: list[ThemeInfo] = []
    for row in _read_csv(path, header=["id", "name", "type", "color"]):
        if not row["name"]:
            continue
        kind = row["type"].casefold()
        if not is_known_layout(kind):
            raise ManifestLoadError(f"Theme {row['name']!r} uses unknown layout {row['type']!r}")
        themes.append(ThemeInfo(id=row["id"] or _slug_id(row["name"]), name=row["name"], type=kind, color=row["color"]))
    _check_unique("theme", [t.id for t in themes])
    return tuple(themes)


def load_characters_csv(path: Path) -> tuple[CharacterInfo, ...]:
    chars = [
        CharacterInfo(id=row["id"] or _slug_id(row["name"]), name=row["name"])
        for row in _read_csv(path, header=["id", "name"])
        if row["name"]
    ]
    _check_unique("character", [c.id for c in chars])
    return tuple(chars)


def load_games_csv(path: Path) -> tuple[GameInfo, ...]:
    games = [
        GameInfo(id=row["id"], name=row["name"], script=row["script"])
        for row in _read_csv(path, header=["id", "name", "script"])
        if row["id"]
    ]
    _check_unique("game", [g.id for g in games])
    return tuple(games)


def _fallback_manifest() -> GameManifest:
    """Built-in manifest used when the CSV files are missing."""

    return GameManifest(
        themes=(
            ThemeInfo(id="forest", name="Whispering Woods", type="winding", color="#2d5a27"),
            ThemeInfo(id="space", name="Galactic Route", type="circular", color="#000022"),
        ),
        characters=(
            CharacterInfo(id="bunny", name="Fluffy Bunny"),
            CharacterInfo(id="bear", name="Friendly Bear"),
            CharacterInfo(id="knight", name="Brave Knight"),
            CharacterInfo(id="astronaut", name="Space Explorer"),
            CharacterInfo(id="robot", name="Robot Buddy"),
            CharacterInfo(id="alien", name="Alien Friend"),
        ),
        games=(
            GameInfo(id="math_add", name="Number Cruncher", script="js/minigames/game_math_add.js"),
            GameInfo(id="memory", name="Memory Match", script="js/minigames/game_memory.js"),
            GameInfo(id="pattern", name="Pattern Match", script="js/minigames/game_pattern.js"),
        ),
    )


def strict_assets() -> bool:
    return os.getenv("ADVENTURE_STRICT_ASSETS", "").strip().lower() in {"1", "true", "yes"}


def load_game_manifest(*, root: Path) -> GameManifest:
    assets_dir = root / "assets"

    # Missing or broken CSVs fall back to the built-in manifest unless
    # ADVENTURE_STRICT_ASSETS=1.
    try:
        return GameManifest(
            themes=load_themes_csv(assets_dir / "themes.csv"),
            characters=load_characters_csv(assets_dir / "characters.csv"),
            games=load_games_csv(assets_dir / "games.csv"),
        )
    except ManifestLoadError:
        if strict_assets():
            raise
        logger.warning("Manifest CSVs under %s unusable; using built-in manifest", assets_dir, exc_info=True)
        return _fallback_manifest()
