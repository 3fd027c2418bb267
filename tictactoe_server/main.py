# main.py (FastAPI) — 三目並べの手順判定サーバー
import logging
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tictactoe_server import config
from tictactoe_server.backend.game_logic import GameResult, GameState, evaluate_request
from tictactoe_server.backend.models import EvaluateResponse, HealthResponse


# ========== ログ ==========
logger = logging.getLogger(__name__)
logging.basicConfig(level=config.LOG_LEVEL)


# ========== FastAPI ==========
app = FastAPI(title="tictactoe-server")

# CORS（盤面 UI は別オリジンから叩く）
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========== ユーティリティ ==========
def status_code_for(result: GameResult) -> int:
    """
    リクエスト形式の不正だけ 403。
    それ以外（不正な手を含む）は 200 で本文に判定ラベルを入れる。
    """
    if result.state is GameState.ILLEGAL_REQUEST:
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_200_OK


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body:
        return None
    try:
        return await request.json()
    except ValueError:
        # JSON でない本文（UnicodeDecodeError も ValueError）
        return None


# ========== エンドポイント ==========
@app.post("/api/evaluate", response_model=EvaluateResponse)
async def evaluate_moves(request: Request):
    payload = await _read_json(request)
    result = evaluate_request(payload)

    if result.state is GameState.ILLEGAL_REQUEST:
        logger.info("illegal request from %s", request.client.host if request.client else "-")
    else:
        logger.debug("evaluate moves=%r -> %s", payload.get("moves"), result.state.value)

    return JSONResponse(status_code=status_code_for(result), content=result.to_dict())


@app.get("/health", response_model=HealthResponse)
def health():
    return {"status": "ok"}


def run():
    logger.info("Starting server: http://%s:%s", config.HOST, config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
