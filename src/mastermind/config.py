from __future__ import annotations
import logging
from pydantic import BaseModel, Field
import yaml

from mastermind.constants import MAX_ATTEMPTS, PER_TURN_GAME_DURATION, TURN_FIELD_LIMIT

class GameCfg(BaseModel):
    # the final turn count (2 * max_attempts + 1) must fit the two-digit turn field
    max_attempts: int = Field(MAX_ATTEMPTS, ge=1, lt=TURN_FIELD_LIMIT // 2)
    per_turn_duration: int = Field(PER_TURN_GAME_DURATION, ge=1)

class ArbiterCfg(BaseModel):
    referee_public_key: str = ""  # hex, raw Ed25519 public key

class SimCfg(BaseModel):
    n_games: int = 100
    seed: int = 0
    mode: str = "ledger"  # or "steps"
    reward: int = Field(1_000, ge=1)
    out: str = "runs/sim_games.csv"

class LoggingCfg(BaseModel):
    level: str = "INFO"
    fmt: str = "%(asctime)s  %(levelname)s  %(name)s  %(message)s"

class FullConfig(BaseModel):
    game: GameCfg = GameCfg()
    arbiter: ArbiterCfg = ArbiterCfg()
    sim: SimCfg = SimCfg()
    logging: LoggingCfg = LoggingCfg()

def load_config(path: str) -> FullConfig:
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return FullConfig.model_validate(raw)

def configure_logging(cfg: LoggingCfg) -> None:
    logging.basicConfig(level=cfg.level.upper(), format=cfg.fmt, datefmt="%H:%M:%S")
