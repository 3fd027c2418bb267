# run_match.py — サーバーに手を 1 マスずつ送って盤面の推移を表示する
import argparse
import logging
import sys
import time
from typing import Dict, List, Optional

import requests  # type: ignore

from tictactoe_server import config
from tictactoe_server.backend.game_logic import GameState, board_from_moves, render_board

logger = logging.getLogger(__name__)

EVALUATE_PATH = "/api/evaluate"


def evaluate(moves: str, base: str = config.BASE_URL, timeout: float = 5.0) -> Dict:
    """
    POST /api/evaluate。Illegal Request の 403 も本文を返す。
    それ以外のエラーは requests の例外として上げる。
    """
    r = requests.post(f"{base}{EVALUATE_PATH}", json={"moves": moves}, timeout=timeout)
    if r.status_code != requests.codes.forbidden:
        r.raise_for_status()
    return r.json()


def run_match(
    tiles: List[str],
    base: str = config.BASE_URL,
    delay: float = 0.0,
    out=None,
) -> Dict:
    """
    "New Game" から始めて tiles を順に足していく。
    勝ち・引き分け・不正のどれかになった時点で止める。
    """
    out = out or sys.stdout
    moves = ""
    result = evaluate(moves, base)
    print(f"start: {result['state']}", file=out)

    for tile in tiles:
        moves += tile
        result = evaluate(moves, base)
        state = GameState(result["state"])
        print(f"{tile} -> {state.value}", file=out)

        if state.is_illegal:
            logger.warning("replay stopped: %s after moves=%r", state.value, moves)
            break

        print(render_board(board_from_moves(moves), result["winning_tiles"]), file=out)

        if state.is_over:
            print(f"終了: {state.value} {result['winning_tiles']}", file=out)
            break

        if delay:
            time.sleep(delay)  # ログ見やすく

    return result


def _parse_tiles(raw: List[str]) -> List[str]:
    # "A1B2C3" のような連結も、"A1 B2 C3" の分割もどちらも受け付ける
    tiles: List[str] = []
    for chunk in raw:
        tiles.extend(chunk[i : i + 2] for i in range(0, len(chunk), 2))
    return tiles


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Replay tic-tac-toe moves against the evaluate API")
    parser.add_argument("moves", nargs="*", help="tiles such as A1 B2 or A1B2")
    parser.add_argument("--base", default=config.BASE_URL, help="server base URL")
    parser.add_argument("--delay", type=float, default=0.0, help="seconds between moves")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL)

    try:
        result = run_match(_parse_tiles(args.moves), base=args.base, delay=args.delay)
    except requests.RequestException as e:
        logger.error("request failed: %s", e)
        return 1

    return 2 if GameState(result["state"]).is_illegal else 0


if __name__ == "__main__":
    sys.exit(main())
