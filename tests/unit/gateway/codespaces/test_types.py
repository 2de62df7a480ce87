"""Tests for codespace data types."""

from cslaunch.gateway.codespaces.types import (
    Codespace,
    CodespaceState,
    ConnectionInfo,
    Machine,
    build_display_name,
)

CONNECTION = ConnectionInfo(
    session_id="session-id",
    session_token="secret-token",
    relay_endpoint="sb://relay.example.com",
    relay_sas="secret-sas",
)


def test_build_display_name_marks_prebuilds() -> None:
    name = "4 cores, 8 GB RAM, 32 GB storage"

    assert build_display_name(name, "pool") == f"{name} (Prebuild ready)"
    assert build_display_name(name, "blob") == f"{name} (Prebuild ready)"
    assert build_display_name(name, "none") == name
    assert build_display_name(name, "") == name


def test_machine_label_is_derived() -> None:
    machine = Machine(name="GIGA", display_name="Gigabits", prebuild_availability="blob")

    assert machine.label == "Gigabits (Prebuild ready)"


def test_connection_secrets_are_not_in_repr() -> None:
    text = repr(Codespace(name="cs", state=CodespaceState.AVAILABLE, connection=CONNECTION))

    assert "secret-token" not in text
    assert "secret-sas" not in text
    assert "session-id" in text


def test_connectable_requires_state_and_connection_info() -> None:
    ready = Codespace(name="cs", state=CodespaceState.AVAILABLE, connection=CONNECTION)
    assert ready.is_connectable
    assert not Codespace(name="cs", state=CodespaceState.AVAILABLE).is_connectable
    assert not Codespace(
        name="cs", state=CodespaceState.STARTING, connection=CONNECTION
    ).is_connectable
