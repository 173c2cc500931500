import dataclasses
import os
import tomllib
from dataclasses import dataclass
from typing import Any


@dataclass
class EngineSettings:
    # Pass action value/target through the ${...}/#{...} interpolator before use.
    interpolate_actions: bool = False
    enable_tracing: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "EngineSettings":
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in cfg.items() if k in known})


def load_canvasflow_toml(path: str | None = None) -> dict[str, Any]:
    """Load a ``canvasflow.toml`` configuration file.

    Searches (in order):
    1. The explicit ``path`` argument.
    2. ``$CANVASFLOW_CONFIG`` environment variable.
    3. ``canvasflow.toml`` in the current working directory.

    Returns an empty dict (plus any environment overrides) if no file is
    found.

    The TOML file can contain a ``[canvasflow]`` section with any of the
    following keys (all optional):

    .. code-block:: toml

        [canvasflow]
        interpolate_actions = false
        enable_tracing = false
        log_level = "INFO"

    Environment variables prefixed with ``CANVASFLOW_`` override TOML values
    (e.g. ``CANVASFLOW_INTERPOLATE_ACTIONS=1``).
    """
    candidates = [
        path,
        os.getenv("CANVASFLOW_CONFIG"),
        "canvasflow.toml",
    ]
    for candidate in candidates:
        if candidate and os.path.exists(candidate):
            with open(candidate, "rb") as fh:
                data = tomllib.load(fh)
            result: dict[str, Any] = dict(data.get("canvasflow", {}))
            _apply_env_overrides(result)
            return result

    result = {}
    _apply_env_overrides(result)
    return result


def _apply_env_overrides(cfg: dict[str, Any]) -> None:
    """Apply ``CANVASFLOW_*`` environment variables on top of cfg dict (in-place)."""
    _BOOL_KEYS = {
        "interpolate_actions",
        "enable_tracing",
    }

    for env_key, env_val in os.environ.items():
        if not env_key.startswith("CANVASFLOW_"):
            continue
        cfg_key = env_key[len("CANVASFLOW_"):].lower()
        if cfg_key == "config":
            continue
        if cfg_key in _BOOL_KEYS:
            cfg[cfg_key] = env_val.lower() in ("1", "true", "yes")
        else:
            cfg[cfg_key] = env_val


def load_settings(path: str | None = None) -> EngineSettings:
    return EngineSettings.from_config(load_canvasflow_toml(path))
