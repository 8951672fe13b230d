"""Tests for the CHIP-8 keypad state."""

from __future__ import annotations

import pytest

from pychip8.io import Keypad


def test_host_keys_map_to_hex_layout() -> None:
    keypad = Keypad()

    keypad.press("x")
    keypad.press("V")

    assert keypad.is_pressed(0x0)
    assert keypad.is_pressed(0xF)
    assert not keypad.is_pressed(0x1)


def test_release_clears_key() -> None:
    keypad = Keypad()
    keypad.press("4")
    assert keypad.is_pressed(0xC)

    keypad.release("4")
    assert not keypad.is_pressed(0xC)


def test_repeated_press_needs_matching_releases() -> None:
    keypad = Keypad()
    keypad.press("q")
    keypad.press("q")

    keypad.release("q")
    assert keypad.is_pressed(0x4)

    keypad.release("q")
    assert not keypad.is_pressed(0x4)


def test_unmapped_keys_are_ignored() -> None:
    keypad = Keypad()
    keypad.press("space")
    assert keypad.snapshot() == (False,) * 16


def test_first_pressed_returns_lowest_code() -> None:
    keypad = Keypad()
    assert keypad.first_pressed() is None

    keypad.set_key(0xE, True)
    keypad.set_key(0x3, True)

    assert keypad.first_pressed() == 0x3


def test_set_key_rejects_invalid_code() -> None:
    with pytest.raises(ValueError):
        Keypad().set_key(0x10, True)


def test_listeners_see_state_changes_only() -> None:
    keypad = Keypad()
    events: list[tuple[int, bool]] = []
    keypad.add_listener(lambda code, pressed: events.append((code, pressed)))

    keypad.set_key(0x5, True)
    keypad.set_key(0x5, True)
    keypad.set_key(0x5, False)

    assert events == [(0x5, True), (0x5, False)]


def test_reset_releases_everything() -> None:
    keypad = Keypad()
    keypad.press("1")
    keypad.reset()
    assert keypad.first_pressed() is None


def test_reset_notifies_listeners_of_releases() -> None:
    keypad = Keypad()
    events: list[tuple[int, bool]] = []
    keypad.add_listener(lambda code, pressed: events.append((code, pressed)))
    keypad.press("x")
    keypad.press("v")

    keypad.reset()

    assert events == [(0x0, True), (0xF, True), (0x0, False), (0xF, False)]
    assert not keypad.is_pressed(0x0)
    # A stale release after reset must not re-notify.
    keypad.release("x")
    assert len(events) == 4
