from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from adventure.node_graph import NODE_COUNT, NodeStatus


class WireModel(BaseModel):
    # Python attributes stay snake_case; JSON on the wire is camelCase.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeOutcome(WireModel):
    node: int
    success: bool
    used_mercy: bool = False
    stars_awarded: int = 0
    at: datetime


class Session(WireModel):
    session_id: str
    profile_name: str
    character_id: str
    theme_id: str

    current_level: int = Field(1, ge=1)
    # Index of the next unresolved node; equal to the path length once the session is won.
    current_node: int = Field(0, ge=0, le=NODE_COUNT)
    total_stars: int = Field(0, ge=0)
    # Set by a mercy advance, cleared by the next success.
    mercy_mode: bool = False

    # Analytics only; no rule reads it.
    node_history: list[NodeOutcome] = Field(default_factory=list)

    created_at: datetime | None = None
    last_updated_at: datetime | None = None


class SessionStartRequest(WireModel):
    profile_name: str = Field("Player", min_length=1, max_length=64)
    char_id: str = Field(..., min_length=1)
    theme_id: str = Field(..., min_length=1)


class ProgressResult(WireModel):
    success: bool
    # Carried for compatibility only; the server decides the award.
    stars: int = 0
    used_mercy: bool = False


class SessionUpdateRequest(WireModel):
    session_id: str = Field(..., min_length=1)
    result: ProgressResult


class SessionUpdateResponse(WireModel):
    success: bool = True
    state: Session


class ThemeInfo(WireModel):
    id: str
    name: str
    type: str
    color: str


class CharacterInfo(WireModel):
    id: str
    name: str


class GameInfo(WireModel):
    id: str
    name: str
    script: str


class Manifest(WireModel):
    themes: list[ThemeInfo]
    characters: list[CharacterInfo]
    games: list[GameInfo]


class NodeView(WireModel):
    id: int
    x: float
    y: float
    status: NodeStatus


class SessionMapResponse(WireModel):
    session_id: str
    layout: str
    victory: bool
    nodes: list[NodeView]


class DeleteSessionsResponse(WireModel):
    success: bool = True
    deleted: int
