"""
Synchronization coordinator for the shared board.

Every inbound event goes through SessionCoordinator.handle, which looks the
event up in a dispatch table, validates its payload, runs the handler
against the single BoardSession and returns the outbound messages. Handlers
never touch sockets; delivery is left to the caller.

The handler signature is::

    def handle_xyz(session: BoardSession, actor_id: str, payload) -> List[Outbound]:
        ...
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from board_engine import (
    FogState,
    Hex,
    Role,
    SessionRegistry,
    TokenStore,
    reveal_around,
)

from .events import (
    BackgroundPayload,
    CellPayload,
    ColoredCellPayload,
    EmptyPayload,
    GridTypePayload,
    JoinPayload,
    PathPayload,
)
from .logging_config import get_logger, activity_logger
from .monitoring import board_cells, joined_users, session_events

logger = get_logger("coordinator")

HOVER_ALPHA = 0.5
SELECT_ALPHA = 1.0


class Target(Enum):
    """Who receives an outbound message."""
    ALL = "all"
    SENDER = "sender"
    OTHERS = "others"  # Everyone except the sender


@dataclass
class Outbound:
    """A message to deliver after an event has been applied."""
    event: str
    data: Any = None
    target: Target = Target.ALL

    def to_message(self) -> dict:
        return {"type": self.event, "data": self.data}


@dataclass
class BoardSession:
    """All shared state for the one board this server hosts."""
    registry: SessionRegistry = field(default_factory=SessionRegistry)
    tokens: TokenStore = field(default_factory=TokenStore)
    fog: FogState = field(default_factory=FogState)
    background_image: Optional[str] = None
    grid_type: str = "standard"


class EventDropped(Exception):
    """Raised by a handler when an event must be ignored."""
    outcome = "dropped"


class UnjoinedActor(EventDropped):
    outcome = "unjoined"


class Unauthorized(EventDropped):
    outcome = "unauthorized"


class MalformedEvent(EventDropped):
    outcome = "malformed"


@dataclass(frozen=True)
class EventHandler:
    func: Callable[..., List[Outbound]]
    payload_model: Type[BaseModel]
    requires_join: bool = True
    mj_only: bool = False


# event name -> handler
HANDLERS: Dict[str, EventHandler] = {}


def on(event: str, payload_model: Type[BaseModel], requires_join: bool = True, mj_only: bool = False):
    """Register a handler for an inbound event."""
    def decorator(func):
        HANDLERS[event] = EventHandler(func, payload_model, requires_join, mj_only)
        return func
    return decorator


# ===================================================================
# Participants
# ===================================================================

@on("ping", EmptyPayload, requires_join=False)
def handle_ping(session: BoardSession, actor_id: str, payload: EmptyPayload) -> List[Outbound]:
    return [Outbound("pong", target=Target.SENDER)]


@on("join", JoinPayload, requires_join=False)
def handle_join(session: BoardSession, actor_id: str, payload: JoinPayload) -> List[Outbound]:
    user = session.registry.join(
        actor_id,
        name=payload.name,
        color=payload.color,
        avatar=payload.avatar,
        is_mj=payload.isMJ,
    )
    joined_users.set(len(session.registry.users))
    activity_logger.log_session_event("joined", actor_id, {"name": user.name, "role": user.role.value})
    return [
        Outbound("users:update", session.registry.user_list()),
        Outbound("user:joined", user.to_dict(), Target.SENDER),
    ]


@on("hover:start", ColoredCellPayload)
def handle_hover_start(session: BoardSession, actor_id: str, payload: ColoredCellPayload) -> List[Outbound]:
    user = session.registry.get(actor_id)
    session.registry.hover_start(actor_id, payload.cell_id)
    return [Outbound("cell:hover", {
        "cellId": payload.cell_id,
        "userId": actor_id,
        "color": payload.color or user.color,
        "alpha": HOVER_ALPHA,
    })]


@on("hover:stop", CellPayload)
def handle_hover_stop(session: BoardSession, actor_id: str, payload: CellPayload) -> List[Outbound]:
    session.registry.hover_stop(actor_id, payload.cell_id)
    return [Outbound("cell:unhover", {"cellId": payload.cell_id, "userId": actor_id})]


# ===================================================================
# Tokens and move previews
# ===================================================================

@on("click", ColoredCellPayload)
def handle_click(session: BoardSession, actor_id: str, payload: ColoredCellPayload) -> List[Outbound]:
    """Place the actor's token; MJ markers never leave debris or a selection."""
    registry = session.registry
    user = registry.get(actor_id)
    color = payload.color or user.color
    target_id = payload.cell_id

    outbound = []
    if user.role != Role.MJ:
        previous = registry.selection_of(actor_id)
        if previous:
            outbound.append(Outbound("cell:unselect", {"cellId": previous, "userId": actor_id}))

    mutations = session.tokens.place_token(target_id, color, user.role)
    outbound.extend(Outbound("board:update", mutation.to_dict()) for mutation in mutations)

    if user.role != Role.MJ:
        registry.select(actor_id, target_id)
        outbound.append(Outbound("cell:click", {
            "cellId": target_id,
            "userId": actor_id,
            "color": color,
            "alpha": SELECT_ALPHA,
        }))

    board_cells.set(len(session.tokens))
    activity_logger.log_board_action(
        actor_id, user.role.value, "place_token",
        {"cell_id": target_id, "color": color, "mutations": len(mutations)}
    )
    return outbound


@on("path:update", PathPayload)
def handle_path_update(session: BoardSession, actor_id: str, payload: PathPayload) -> List[Outbound]:
    """Relay a move preview to everyone else, exactly as the sender drew it."""
    return [Outbound("path:update", {
        "userId": actor_id,
        "path": [cell.model_dump() for cell in payload.path],
        "color": payload.color,
        "startId": payload.startId,
    }, Target.OTHERS)]


# ===================================================================
# Game master controls
# ===================================================================

@on("background:set", BackgroundPayload, mj_only=True)
def handle_background_set(session: BoardSession, actor_id: str, payload: BackgroundPayload) -> List[Outbound]:
    session.background_image = payload.url
    activity_logger.log_board_action(actor_id, Role.MJ.value, "set_background", {"url": payload.url})
    return [Outbound("background:update", payload.url)]


@on("grid:set_type", GridTypePayload, mj_only=True)
def handle_grid_set_type(session: BoardSession, actor_id: str, payload: GridTypePayload) -> List[Outbound]:
    session.grid_type = payload.type
    return [Outbound("grid:type_update", payload.type)]


@on("grid:fill_dark", EmptyPayload, mj_only=True)
def handle_grid_fill_dark(session: BoardSession, actor_id: str, payload: EmptyPayload) -> List[Outbound]:
    session.fog.enable()
    activity_logger.log_board_action(actor_id, Role.MJ.value, "fill_dark")
    return [Outbound("grid:dark_update", {
        "enabled": True,
        "revealedCells": session.fog.snapshot(),
    })]


@on("grid:reset_dark", EmptyPayload, mj_only=True)
def handle_grid_reset_dark(session: BoardSession, actor_id: str, payload: EmptyPayload) -> List[Outbound]:
    session.fog.disable()
    activity_logger.log_board_action(actor_id, Role.MJ.value, "reset_dark")
    return [Outbound("grid:dark_update", {"enabled": False, "revealedCells": {}})]


@on("grid:clear_cell", CellPayload, mj_only=True)
def handle_grid_clear_cell(session: BoardSession, actor_id: str, payload: CellPayload) -> List[Outbound]:
    fog = session.fog
    if not fog.dark_mode or fog.is_revealed(payload.cell_id):
        return []

    updates = reveal_around(Hex(payload.q, payload.r), fog)
    if not updates:
        return []
    activity_logger.log_board_action(
        actor_id, Role.MJ.value, "reveal", {"cell_id": payload.cell_id, "updated": len(updates)}
    )
    return [Outbound(
        "grid:opacities_updated",
        [{"id": cell_id, "opacity": opacity} for cell_id, opacity in updates],
    )]


# ===================================================================
# Coordinator
# ===================================================================

class SessionCoordinator:
    """Applies inbound events to the board session, one at a time."""

    def __init__(self, session: Optional[BoardSession] = None):
        self.session = session or BoardSession()
        # Held by callers across handle() and delivery of its result.
        self.lock = asyncio.Lock()

    def reset(self):
        """Forget all board state, as after a process restart."""
        self.session = BoardSession()
        self.lock = asyncio.Lock()

    def snapshot(self) -> dict:
        """Full state for a newly connected client."""
        session = self.session
        return {
            "users": session.registry.user_list(),
            "selections": dict(session.registry.selections),
            "boardState": session.tokens.snapshot(),
            "backgroundImage": session.background_image,
            "gridType": session.grid_type,
            "darkMode": session.fog.dark_mode,
            "revealedCells": session.fog.snapshot(),
        }

    def connect(self, connection_id: str) -> List[Outbound]:
        activity_logger.log_session_event("connected", connection_id)
        return [Outbound("state:full", self.snapshot(), Target.SENDER)]

    def disconnect(self, connection_id: str) -> List[Outbound]:
        """Drop everything tied to a connection and tell the others."""
        registry = self.session.registry
        was_joined = registry.is_joined(connection_id)
        vacated, hovered = registry.leave(connection_id)
        joined_users.set(len(registry.users))
        activity_logger.log_session_event("disconnected", connection_id, {"joined": was_joined})

        outbound = [
            Outbound("cell:unhover", {"cellId": cell_id, "userId": connection_id})
            for cell_id in hovered
        ]
        if vacated:
            outbound.append(Outbound("cell:unselect", {"cellId": vacated, "userId": connection_id}))
        if was_joined:
            outbound.append(Outbound("users:update", registry.user_list()))
        return outbound

    def handle(self, actor_id: str, event: str, data: Any = None) -> List[Outbound]:
        """
        Apply one inbound event.

        Dropped events (unknown, malformed, from an unjoined connection or
        unauthorized) produce no messages and leave the session untouched.
        """
        handler = HANDLERS.get(event)
        label = event if handler else "unknown"
        try:
            if handler is None:
                raise MalformedEvent(f"Unknown event type: {event!r}")
            self._authorize(handler, actor_id)
            payload = self._parse(handler, data)
            outbound = handler.func(self.session, actor_id, payload)
        except (UnjoinedActor, Unauthorized) as e:
            session_events.labels(event=label, outcome=e.outcome).inc()
            logger.debug("event_dropped", event_type=event, connection_id=actor_id, reason=e.outcome)
            return []
        except MalformedEvent as e:
            session_events.labels(event=label, outcome=e.outcome).inc()
            logger.warning("malformed_event", event_type=event, connection_id=actor_id, error=str(e))
            return []

        session_events.labels(event=label, outcome="applied").inc()
        return outbound

    def _parse(self, handler: EventHandler, data: Any) -> BaseModel:
        try:
            return handler.payload_model.model_validate(data if data is not None else {})
        except ValidationError as e:
            raise MalformedEvent(str(e))

    def _authorize(self, handler: EventHandler, actor_id: str):
        registry = self.session.registry
        if handler.requires_join and not registry.is_joined(actor_id):
            raise UnjoinedActor(actor_id)
        if handler.mj_only and not registry.is_mj(actor_id):
            raise Unauthorized(actor_id)


# Global coordinator instance
coordinator = SessionCoordinator()
