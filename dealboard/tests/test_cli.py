"""Tests for dealboard CLI commands."""

from __future__ import annotations

from unittest.mock import patch

from typer.testing import CliRunner

from dealboard.cli import app
from dealboard.errors import StoreError
from dealboard.tests.conftest import USER_ID

runner = CliRunner()

DEALS = [
    {"id": "d1", "title": "Alpha", "status": "OPEN", "value": 1500, "user_id": USER_ID},
    {"id": "d2", "title": "Beta", "status": "WON", "value": 300, "user_id": USER_ID},
]


def test_board_lists_deals(fake_store):
    fake_store.collections["deals"] = DEALS
    with patch("dealboard.cli.make_store", return_value=fake_store):
        result = runner.invoke(app, ["board", "--user", USER_ID])

    assert result.exit_code == 0
    assert "Alpha" in result.output
    assert "Beta" in result.output
    assert "1,500.00" in result.output


def test_board_load_failure(fake_store):
    fake_store.list.side_effect = StoreError("offline")
    with patch("dealboard.cli.make_store", return_value=fake_store):
        result = runner.invoke(app, ["board", "--user", USER_ID])

    assert result.exit_code == 1
    assert "Failed to load deals" in result.output


def test_board_requires_user():
    result = runner.invoke(app, ["board"])
    assert result.exit_code == 1


def test_move_command(fake_store):
    fake_store.collections["deals"] = DEALS
    with patch("dealboard.cli.make_store", return_value=fake_store):
        result = runner.invoke(app, ["move", "d1", "pending", "--user", USER_ID])

    assert result.exit_code == 0
    assert "PENDING" in result.output
    fake_store.update.assert_awaited_once_with("deals", "d1", {"status": "PENDING"})


def test_move_unknown_deal(fake_store):
    fake_store.collections["deals"] = DEALS
    with patch("dealboard.cli.make_store", return_value=fake_store):
        result = runner.invoke(app, ["move", "zzz", "WON", "--user", USER_ID])

    assert result.exit_code == 1
    assert "not loaded" in result.output
