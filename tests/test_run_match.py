"""Replay client tests. requests.post is routed to the in-process app."""

import io
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from tictactoe_server import run_match as client_mod
from tictactoe_server.main import app

BASE = "http://testserver"


@pytest.fixture
def routed_post():
    api = TestClient(app)

    def fake_post(url, json=None, timeout=None):
        assert url.startswith(BASE)
        return api.post(url[len(BASE):], json=json)

    with patch.object(client_mod.requests, "post", side_effect=fake_post) as mocked:
        yield mocked


class TestEvaluateCall:
    def test_returns_body(self, routed_post):
        assert client_mod.evaluate("A1", BASE) == {"state": "Player O Turns", "winning_tiles": []}
        routed_post.assert_called_once()

    def test_server_error_raises(self):
        response = MagicMock(status_code=500)
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        with patch.object(client_mod.requests, "post", return_value=response):
            with pytest.raises(requests.HTTPError):
                client_mod.evaluate("A1", BASE)

    def test_forbidden_body_is_returned(self):
        response = MagicMock(status_code=403)
        response.json.return_value = {"state": "Illegal Request", "winning_tiles": []}
        with patch.object(client_mod.requests, "post", return_value=response):
            assert client_mod.evaluate("A1", BASE)["state"] == "Illegal Request"
        response.raise_for_status.assert_not_called()


class TestRunMatch:
    def test_plays_until_win(self, routed_post):
        out = io.StringIO()
        result = client_mod.run_match(["A1", "B1", "A2", "B2", "A3", "C3"], base=BASE, out=out)
        assert result == {"state": "Player X Wins", "winning_tiles": ["A1", "A2", "A3"]}
        # start + five moves, C3 is never sent
        assert routed_post.call_count == 6
        text = out.getvalue()
        assert "start: Player X Turns" in text
        assert "A3 -> Player X Wins" in text
        assert "3  x . ." in text

    def test_stops_on_illegal(self, routed_post):
        out = io.StringIO()
        result = client_mod.run_match(["A1", "A1", "B2"], base=BASE, out=out)
        assert result["state"] == "Illegal Duplicate Move"
        assert routed_post.call_count == 3

    def test_draw(self, routed_post):
        tiles = ["A1", "B1", "C1", "B2", "A2", "C2", "B3", "A3", "C3"]
        result = client_mod.run_match(tiles, base=BASE, out=io.StringIO())
        assert result["state"] == "Draw"


class TestMain:
    def test_parse_tiles(self):
        assert client_mod._parse_tiles(["A1B2", "C3"]) == ["A1", "B2", "C3"]

    def test_exit_codes(self, routed_post, capsys):
        assert client_mod.main(["A1B1A2B2A3", "--base", BASE]) == 0
        assert client_mod.main(["A1", "Z9", "--base", BASE]) == 2
        assert "Player X Wins" in capsys.readouterr().out

    def test_connection_error(self):
        with patch.object(client_mod.requests, "post", side_effect=requests.ConnectionError("refused")):
            assert client_mod.main(["A1", "--base", BASE]) == 1
