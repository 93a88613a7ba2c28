# Task board configuration
# Override via taskboard.yaml, TASKBOARD_* environment variables, or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

CONFIG_PATH = Path("taskboard.yaml")

ENV_OVERRIDES = {
    "TASKBOARD_DB": "db_path",
    "TASKBOARD_HOST": "host",
    "TASKBOARD_PORT": "port",
    "TASKBOARD_LOG_LEVEL": "log_level",
    "TASKBOARD_POLL_INTERVAL": "poll_interval",
}


@dataclass
class Config:
    """Runtime configuration for the task board server."""

    # Backing store
    db_path: str = "~/.local/share/taskboard/tasks.db"
    # Seconds between checks for writes made by other processes
    poll_interval: float = 0.5

    # HTTP API (bind to localhost unless told otherwise)
    host: str = "127.0.0.1"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s [taskboard] %(levelname)s: %(message)s"

    def apply_env(self, environ=None):
        """Environment variables win over the YAML file."""
        environ = os.environ if environ is None else environ
        for var, name in ENV_OVERRIDES.items():
            value = environ.get(var)
            if not value:
                continue
            if name in ("port", "poll_interval"):
                try:
                    value = int(value) if name == "port" else float(value)
                except ValueError:
                    continue
            setattr(self, name, value)

    def resolve_paths(self):
        """Expand ~ and make sure the database directory exists."""
        self.db_path = str(Path(self.db_path).expanduser())
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls, path: Optional[str] = None, environ=None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        known = {f.name for f in fields(cls)}
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (yaml.YAMLError, TypeError, AttributeError):
                cfg = cls()
        else:
            cfg = cls()
        cfg.apply_env(environ)
        cfg.resolve_paths()
        return cfg
