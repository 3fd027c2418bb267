from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError

from tictactoe_server.backend.models import MovesRequest


# ========== 定数（盤面） ==========
class Tile(str, Enum):
    """3x3 盤のマス。列 A-C と行 1-3 の 2 文字で表す。"""

    A1 = "A1"
    B1 = "B1"
    C1 = "C1"
    A2 = "A2"
    B2 = "B2"
    C2 = "C2"
    A3 = "A3"
    B3 = "B3"
    C3 = "C3"


class Player(str, Enum):
    X = "X"
    O = "O"

    def opposite(self) -> "Player":
        return Player.O if self is Player.X else Player.X


class GameState(str, Enum):
    X_TURN = "Player X Turns"
    O_TURN = "Player O Turns"
    X_WINS = "Player X Wins"
    O_WINS = "Player O Wins"
    DRAW = "Draw"
    ILLEGAL_REQUEST = "Illegal Request"
    ILLEGAL_MOVE_LENGTH = "Illegal Move Length"
    ILLEGAL_UNKNOWN_MOVE = "Illegal Unknown Move"
    ILLEGAL_DUPLICATE_MOVE = "Illegal Duplicate Move"
    ILLEGAL_EXTRA_MOVE = "Illegal Extra Move"

    @property
    def is_illegal(self) -> bool:
        return self.value.startswith("Illegal")

    @property
    def is_over(self) -> bool:
        return self in (GameState.X_WINS, GameState.O_WINS, GameState.DRAW)


TILE_CODES: FrozenSet[str] = frozenset(t.value for t in Tile)

MOVE_WIDTH = 2
MAX_MOVES_LENGTH = MOVE_WIDTH * len(Tile)  # 18
LAST_PLY = len(Tile) - 1  # 8


# 行 → 列 → 斜め の順。最初に揃ったラインを返す
LINES: Tuple[Tuple[Tile, Tile, Tile], ...] = (
    (Tile.A1, Tile.B1, Tile.C1),
    (Tile.A2, Tile.B2, Tile.C2),
    (Tile.A3, Tile.B3, Tile.C3),
    (Tile.A1, Tile.A2, Tile.A3),
    (Tile.B1, Tile.B2, Tile.B3),
    (Tile.C1, Tile.C2, Tile.C3),
    (Tile.A1, Tile.B2, Tile.C3),
    (Tile.A3, Tile.B2, Tile.C1),
)


@dataclass(frozen=True)
class GameResult:
    """評価結果。winning_tiles は空か、1 ライン分の 3 マス"""

    state: GameState
    winning_tiles: Tuple[Tile, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "winning_tiles": [t.value for t in self.winning_tiles],
        }


# ========== 判定 ==========
def split_moves(moves: str) -> List[str]:
    """
    2 文字ずつ区切る。奇数長なら末尾は 1 文字のまま残る
    （どのマスにも一致しないので Unknown Move になる）。
    """
    return [moves[i : i + MOVE_WIDTH] for i in range(0, len(moves), MOVE_WIDTH)]


def player_for_ply(ply: int) -> Player:
    return Player.X if ply % 2 == 0 else Player.O


def winning_line(tiles: Iterable[Tile]) -> Optional[Tuple[Tile, Tile, Tile]]:
    """tiles が含むラインのうち、LINES の順で最初のものを返す。無ければ None"""
    owned = set(tiles)
    for line in LINES:
        if all(tile in owned for tile in line):
            return line
    return None


def _win_state(player: Player) -> GameState:
    return GameState.X_WINS if player is Player.X else GameState.O_WINS


def _turn_state(player: Player) -> GameState:
    return GameState.X_TURN if player is Player.X else GameState.O_TURN


def evaluate(moves_input: Any) -> GameResult:
    """
    手順文字列を先頭から再生し、盤面の状態を判定する。
    どんな入力でも例外は投げず、判定ラベルとして返す。
    """
    if not isinstance(moves_input, str):
        return GameResult(GameState.ILLEGAL_REQUEST)

    moves = moves_input
    if len(moves) == 0:
        return GameResult(GameState.X_TURN)

    if len(moves) > MAX_MOVES_LENGTH:
        return GameResult(GameState.ILLEGAL_MOVE_LENGTH)

    taken: set = set()
    owned: Dict[Player, set] = {Player.X: set(), Player.O: set()}

    for ply, chunk in enumerate(split_moves(moves)):
        if chunk not in TILE_CODES:
            return GameResult(GameState.ILLEGAL_UNKNOWN_MOVE)

        tile = Tile(chunk)
        if tile in taken:
            return GameResult(GameState.ILLEGAL_DUPLICATE_MOVE)

        taken.add(tile)
        mover = player_for_ply(ply)
        owned[mover].add(tile)

        is_last = (ply + 1) * MOVE_WIDTH >= len(moves)

        line = winning_line(owned[mover])
        if line is not None:
            # 勝ちは最後の手でなければならない
            if not is_last:
                return GameResult(GameState.ILLEGAL_EXTRA_MOVE)
            return GameResult(_win_state(mover), line)

        if ply == LAST_PLY and mover is Player.X:
            return GameResult(GameState.DRAW)

        if is_last:
            return GameResult(_turn_state(mover.opposite()))

    # 到達しない（最後のチャンクで必ず return する）
    return GameResult(GameState.X_TURN)


# ========== リクエスト ==========
def parse_request(payload: Any) -> Union[MovesRequest, GameResult]:
    """
    リクエスト本文を厳格に検証する。
    moves が文字列でなければ Illegal Request の GameResult を返す。
    """
    try:
        return MovesRequest.model_validate(payload)
    except ValidationError:
        return GameResult(GameState.ILLEGAL_REQUEST)


def evaluate_request(payload: Any) -> GameResult:
    parsed = parse_request(payload)
    if isinstance(parsed, GameResult):
        return parsed
    return evaluate(parsed.moves)


# ========== 表示用 ==========
def board_from_moves(moves: str) -> Dict[Tile, Player]:
    """
    各マスの持ち主を返す。不正な手に当たったらそこで打ち切る。
    """
    board: Dict[Tile, Player] = {}
    if not isinstance(moves, str) or len(moves) > MAX_MOVES_LENGTH:
        return board
    for ply, chunk in enumerate(split_moves(moves)):
        if chunk not in TILE_CODES or Tile(chunk) in board:
            break
        board[Tile(chunk)] = player_for_ply(ply)
    return board


def render_board(board: Dict[Tile, Player], winning_tiles: Iterable[str] = ()) -> str:
    """テキスト盤面。勝ちマスは小文字で表示"""
    winners = {getattr(t, "value", t) for t in winning_tiles}
    rows = ["   A B C"]
    for row in "123":
        cells = []
        for col in "ABC":
            tile = Tile(col + row)
            owner = board.get(tile)
            if owner is None:
                cells.append(".")
            elif tile.value in winners:
                cells.append(owner.value.lower())
            else:
                cells.append(owner.value)
        rows.append(f"{row}  " + " ".join(cells))
    return "\n".join(rows)
