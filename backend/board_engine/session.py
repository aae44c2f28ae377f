"""
Session registry: who is connected, what they hover, what they have selected.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .tokens import Role

DEFAULT_COLOR = "#ffffff"


@dataclass
class User:
    """A joined participant. The id is the connection id."""
    id: str
    name: str
    color: str = DEFAULT_COLOR
    avatar: Optional[str] = None
    role: Role = Role.DEFAULT

    @property
    def is_mj(self) -> bool:
        return self.role == Role.MJ

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "avatar": self.avatar,
            "role": self.role.value,
        }


@dataclass
class SessionRegistry:
    """Tracks joined users, hover sets and per-user selections."""
    users: Dict[str, User] = field(default_factory=dict)
    # user_id -> cell_id
    selections: Dict[str, str] = field(default_factory=dict)
    # cell_id -> user ids hovering it
    hovers: Dict[str, Set[str]] = field(default_factory=dict)

    def join(
        self,
        connection_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
        avatar: Optional[str] = None,
        is_mj: bool = False,
    ) -> User:
        """Register (or re-register) the user behind a connection."""
        user = User(
            id=connection_id,
            name=name or f"User {connection_id[:4]}",
            color=color or DEFAULT_COLOR,
            avatar=avatar or None,
            role=Role.MJ if is_mj else Role.DEFAULT,
        )
        self.users[connection_id] = user
        return user

    def leave(self, user_id: str) -> Tuple[Optional[str], List[str]]:
        """
        Forget a user.

        Returns the cell they had selected (or None) and the cells they were
        hovering, so the caller can tell everyone else.
        """
        self.users.pop(user_id, None)
        vacated = self.selections.pop(user_id, None)
        hovered = [cell_id for cell_id, hovering in self.hovers.items() if user_id in hovering]
        for cell_id in hovered:
            self.hover_stop(user_id, cell_id)
        return vacated, hovered

    def get(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def is_joined(self, user_id: str) -> bool:
        return user_id in self.users

    def is_mj(self, user_id: str) -> bool:
        user = self.users.get(user_id)
        return user is not None and user.is_mj

    def select(self, user_id: str, cell_id: str) -> Optional[str]:
        """Record a user's new selection and return the one it replaces."""
        previous = self.selections.get(user_id)
        self.selections[user_id] = cell_id
        return previous

    def selection_of(self, user_id: str) -> Optional[str]:
        return self.selections.get(user_id)

    def hover_start(self, user_id: str, cell_id: str):
        self.hovers.setdefault(cell_id, set()).add(user_id)

    def hover_stop(self, user_id: str, cell_id: str):
        hovering = self.hovers.get(cell_id)
        if hovering is None:
            return
        hovering.discard(user_id)
        if not hovering:
            del self.hovers[cell_id]

    def user_list(self) -> List[dict]:
        return [user.to_dict() for user in self.users.values()]
