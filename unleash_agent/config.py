"""Runtime overrides for ``Params``.

Overrides are plain JSON objects keyed by ``Params`` attribute name. They are
gathered from three places, later ones winning:

1. the ``UNLEASH_AGENT_CONFIG_JSON`` environment variable,
2. an inline ``--json`` object,
3. a ``--config`` file, which may name a ``BASE_CONFIG`` file to start from.

``--set KEY=VALUE`` items are applied on top by the launcher. Anything that
cannot be used ends the process with ``SystemExit`` before the match starts.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from unleash_agent.agent.params import Params

logger = logging.getLogger(__name__)

ENV_VAR = "UNLEASH_AGENT_CONFIG_JSON"
BASE_KEY = "BASE_CONFIG"


def coerce_scalar(raw: str) -> Any:
    """Best-effort typing of a ``--set`` value: bool, int, float, else str."""
    text = raw.strip()
    if text.lower() in ("true", "false"):
        return text.lower() == "true"
    for kind in (int, float):
        try:
            return kind(text)
        except ValueError:
            pass
    return text


def _parse_object(text: str, origin: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise SystemExit(f"Invalid {origin}: {e}")
    if not isinstance(data, dict):
        raise SystemExit(f"{origin} must be a JSON object")
    return data


def _read_object(path: Path, origin: str) -> Dict[str, Any]:
    if not path.exists():
        raise SystemExit(f"{origin} not found: {path}")
    return _parse_object(path.read_text(encoding="utf-8"), f"{origin} {path}")


def _resolve_base(config_path: Path, base: str) -> Path:
    candidate = Path(base)
    if candidate.is_absolute():
        return candidate
    beside = (config_path.parent / candidate).resolve()
    return beside if beside.exists() else (Path.cwd() / candidate).resolve()


def _read_layered(path: Path) -> Dict[str, Any]:
    layer = _read_object(path, "Config file")
    base = layer.pop(BASE_KEY, None)
    if not (isinstance(base, str) and base.strip()):
        return layer
    merged = _read_object(_resolve_base(path, base), "Base config file")
    merged.update(layer)
    return merged


def load_config(path: Optional[str], inline_json: Optional[str]) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {}
    env_json = os.environ.get(ENV_VAR)
    if env_json:
        cfg.update(_parse_object(env_json, ENV_VAR))
    if inline_json:
        cfg.update(_parse_object(inline_json, "--json"))
    if path:
        cfg.update(_read_layered(Path(path)))
    return cfg


def apply_set_items(cfg: Dict[str, Any], items: Iterable[str]) -> Dict[str, Any]:
    for item in items:
        key, sep, value = item.partition("=")
        if not sep:
            raise SystemExit(f"Invalid --set '{item}', expected KEY=VALUE")
        cfg[key.strip()] = coerce_scalar(value)
    return cfg


def apply_config(cfg: Dict[str, Any]) -> List[str]:
    """Push `cfg` into ``Params`` and report which keys took effect."""
    try:
        applied = Params.apply_overrides(cfg)
    except (TypeError, ValueError) as e:
        raise SystemExit(f"Invalid parameters: {e}")
    ignored = sorted(str(k) for k in cfg if k not in applied and k != BASE_KEY)
    if ignored:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(ignored))
    if applied:
        logger.info("Applied overrides: %s", ", ".join(applied))
    return applied
