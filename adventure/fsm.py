from __future__ import annotations

from statemachine import State, StateMachine

from adventure.api.models import Session
from adventure.node_graph import NODE_COUNT

IN_PROGRESS = "in_progress"
VICTORY = "victory"


def phase_of(session: Session, *, node_count: int = NODE_COUNT) -> str:
    return VICTORY if session.current_node >= node_count else IN_PROGRESS


class SessionFSM(StateMachine):
    """Top-level session states: in progress -> victory.

    Mercy and the failure counter are sub-state of `in_progress`, not states of
    their own. `advance` loops on `in_progress` until the move that lands on the
    last node, which finishes the machine.
    """

    allow_event_without_transition = False

    in_progress = State(IN_PROGRESS, value=IN_PROGRESS, initial=True)
    victory = State(VICTORY, value=VICTORY, final=True)

    advance = in_progress.to(victory, cond="reaches_goal") | in_progress.to.itself(unless="reaches_goal")

    def __init__(self, session: Session, *, node_count: int = NODE_COUNT):
        self.session = session
        self.node_count = node_count
        super().__init__(start_value=phase_of(session, node_count=node_count))

    def reaches_goal(self) -> bool:
        return self.session.current_node + 1 >= self.node_count

    @property
    def finished(self) -> bool:
        return self.current_state == self.victory
