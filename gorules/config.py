# config.py
# Settings come from the environment, optionally seeded from a dotenv file
# (gorules.env by default, or the file named by GORULES_ENV).
# Engine settings live in the [engine] table of a TOML file.
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from gorules.goban_model import DEFAULT_SIZE, KOMI
from gorules.gtp_engine import EngineConfig

DEFAULT_ENV_FILE = "gorules.env"


# Helpers to read env with defaults
def getf(name: str, default: float) -> float:
    v = os.getenv(name)
    try:
        return float(v) if v is not None else float(default)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {v!r}") from None


def geti(name: str, default: int) -> int:
    v = os.getenv(name)
    try:
        return int(v) if v is not None else int(default)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {v!r}") from None


def gets(name: str, default: Optional[str]) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def getb(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    s = v.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean, got {v!r}")


@dataclass
class Settings:
    board_size: int = DEFAULT_SIZE
    komi: float = KOMI
    superko: bool = False
    suggest_timeout: float = 30.0
    engine_config: Optional[str] = None


def load_settings(env_path: Optional[str] = None) -> Settings:
    if env_path is None:
        env_path = gets("GORULES_ENV", DEFAULT_ENV_FILE)
    if os.path.exists(env_path):
        load_dotenv(env_path, override=False)
    settings = Settings(
        board_size=geti("GORULES_BOARD_SIZE", DEFAULT_SIZE),
        komi=getf("GORULES_KOMI", KOMI),
        superko=getb("GORULES_SUPERKO", False),
        suggest_timeout=getf("GORULES_SUGGEST_TIMEOUT", 30.0),
        engine_config=gets("GORULES_ENGINE_CONFIG", None),
    )
    if not 1 <= settings.board_size <= 25:
        raise ValueError(f"GORULES_BOARD_SIZE must be between 1 and 25, got {settings.board_size}")
    if settings.suggest_timeout <= 0:
        raise ValueError(f"GORULES_SUGGEST_TIMEOUT must be positive, got {settings.suggest_timeout}")
    return settings


def _read_toml(path: str) -> dict:
    # try tomllib (py3.11+), then toml package
    try:
        import tomllib
    except ImportError:
        import toml
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_engine_config(path: str) -> EngineConfig:
    data = _read_toml(path)
    engine = data.get("engine")
    if not isinstance(engine, dict):
        raise ValueError(f"{path}: missing [engine] table")
    if not engine.get("binary_path"):
        raise ValueError(f"{path}: engine.binary_path is required")
    threads = engine.get("threads")
    return EngineConfig(
        binary_path=str(engine["binary_path"]),
        start_option=engine.get("start_option"),
        model_file=engine.get("model_file"),
        config_file=engine.get("config_file"),
        threads=int(threads) if threads is not None else None,
        extra_args=[str(a) for a in engine.get("extra_args", [])],
        working_dir=engine.get("working_dir"),
        env={str(k): str(v) for k, v in engine.get("env", {}).items()} or None,
    )
