import json
import logging
import secrets
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "slate.config.json"

DEFAULTS = {
    "host": "127.0.0.1",
    "port": 4567,
    "data_dir": "data",
    "users_file": "users.yml",
    "secret_key": None,
    "debug": False,
}


@dataclass(frozen=True)
class Config:
    host: str
    port: int
    data_dir: Path
    users_file: Path
    secret_key: str
    debug: bool = False


def _read_config_file(path: Path) -> dict:

    if not path.is_file():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            user = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load {path.name}: {e}")
        return {}
    if not isinstance(user, dict):
        logger.warning(f"Ignoring {path.name}: expected a JSON object")
        return {}
    return user


def load_config(path: Path | None = None, **overrides) -> Config:
    """Merge defaults, the JSON config file and explicit overrides.

    Relative ``data_dir`` and ``users_file`` entries resolve against the
    directory holding the config file, which defaults to
    ``slate.config.json`` in the working directory. Overrides whose value is ``None``
    are ignored so that unset command-line flags fall through.
    """
    path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME
    cfg = dict(DEFAULTS)
    cfg.update(_read_config_file(path))
    cfg.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(cfg) - set(DEFAULTS)
    for key in sorted(unknown):
        logger.warning(f"Unknown config key ignored: {key}")

    root = path.resolve().parent
    secret_key = cfg["secret_key"]
    if not secret_key:
        logger.warning("No secret_key configured; sessions will not survive a restart")
        secret_key = secrets.token_hex(32)

    return Config(
        host=str(cfg["host"]),
        port=int(cfg["port"]),
        data_dir=root / cfg["data_dir"],
        users_file=root / cfg["users_file"],
        secret_key=secret_key,
        debug=bool(cfg["debug"]),
    )
