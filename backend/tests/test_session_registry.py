"""
Tests for the session registry.
"""
from board_engine import DEFAULT_COLOR, Role, SessionRegistry


def test_join_defaults():
    """Test default name, color and role for a bare join."""
    registry = SessionRegistry()
    user = registry.join("abcdef-1234")

    assert user.name == "User abcd"
    assert user.color == DEFAULT_COLOR
    assert user.avatar is None
    assert user.role == Role.DEFAULT
    assert registry.is_joined("abcdef-1234")
    assert not registry.is_mj("abcdef-1234")


def test_join_as_mj():
    """Test that the MJ flag alone decides the role."""
    registry = SessionRegistry()
    user = registry.join("c1", name="Dungeon", color="#123456", avatar="http://x/a.png", is_mj=True)

    assert user.role == Role.MJ
    assert registry.is_mj("c1")
    assert user.to_dict() == {
        "id": "c1",
        "name": "Dungeon",
        "color": "#123456",
        "avatar": "http://x/a.png",
        "role": "MJ",
    }


def test_rejoin_replaces_user():
    """Test that joining twice from one connection keeps one user."""
    registry = SessionRegistry()
    registry.join("c1", name="First")
    registry.join("c1", name="Second", is_mj=True)

    assert len(registry.users) == 1
    assert registry.get("c1").name == "Second"
    assert registry.is_mj("c1")


def test_select_returns_previous():
    """Test selection bookkeeping."""
    registry = SessionRegistry()
    registry.join("c1")

    assert registry.select("c1", "0,0") is None
    assert registry.select("c1", "1,0") == "0,0"
    assert registry.selection_of("c1") == "1,0"


def test_hover_sets():
    """Test hover membership and cleanup of empty sets."""
    registry = SessionRegistry()
    registry.hover_start("c1", "0,0")
    registry.hover_start("c2", "0,0")
    assert registry.hovers["0,0"] == {"c1", "c2"}

    registry.hover_stop("c1", "0,0")
    assert registry.hovers["0,0"] == {"c2"}
    registry.hover_stop("c2", "0,0")
    assert "0,0" not in registry.hovers

    # Stopping a hover that never started is harmless.
    registry.hover_stop("c3", "9,9")


def test_leave_returns_vacated_cell_and_hovers():
    """Test that leaving clears user, selection and hovers."""
    registry = SessionRegistry()
    registry.join("c1")
    registry.join("c2")
    registry.select("c1", "2,2")
    registry.hover_start("c1", "3,3")
    registry.hover_start("c2", "3,3")

    vacated, hovered = registry.leave("c1")

    assert vacated == "2,2"
    assert hovered == ["3,3"]
    assert not registry.is_joined("c1")
    assert "c1" not in registry.selections
    assert registry.hovers["3,3"] == {"c2"}


def test_leave_unknown_user():
    """Test leaving with nothing to clean up."""
    registry = SessionRegistry()
    assert registry.leave("ghost") == (None, [])
