from pydantic import BaseModel, ConfigDict, StrictStr
from typing import List


class MovesRequest(BaseModel):
    # moves 以外のキーは無視。数値などを文字列に変換しない
    model_config = ConfigDict(extra="ignore")

    moves: StrictStr


class EvaluateResponse(BaseModel):
    state: str
    winning_tiles: List[str] = []


class HealthResponse(BaseModel):
    status: str = "ok"
