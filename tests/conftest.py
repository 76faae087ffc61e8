"""Shared fixtures for the Tic-Tac-Toe tests."""

import pytest


@pytest.fixture
def make_board():
    """Build a board from a 9-char string, '.' for empty."""

    def build(text):
        return tuple(" " if ch == "." else ch for ch in text)

    return build
