# config.py — 環境変数（.env も可）から設定を読む
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent.parent

load_dotenv(dotenv_path=ROOT / ".env")


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    if v is not None and str(v).strip() != "":
        return str(v).strip()
    return default


def _split_csv(raw: str) -> List[str]:
    return [x.strip() for x in raw.split(",") if x.strip()]


# ========== サーバー ==========
HOST = _env("TTT_HOST", "0.0.0.0")
try:
    PORT = int(_env("TTT_PORT", "8000"))
except ValueError:
    raise RuntimeError(f"TTT_PORT must be an integer, got {os.getenv('TTT_PORT')!r}")

LOG_LEVEL = _env("TTT_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = _split_csv(_env("TTT_CORS_ORIGINS", "*")) or ["*"]

# ========== クライアント ==========
BASE_URL = _env("TTT_BASE_URL", f"http://127.0.0.1:{PORT}").rstrip("/")
