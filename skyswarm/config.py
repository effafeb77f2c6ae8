import copy
import pathlib

import yaml

from .core.state import FormationType


class ConfigError(ValueError):
    pass


DEFAULT_CONFIG = {
    "seed": None,
    "area": {"width": 800.0, "height": 600.0, "margin": 20.0, "spawn_margin": 100.0},
    "agents": {"count": 10, "master_battery": [90.0, 100.0], "battery": [50.0, 100.0]},
    "targets": {"count": [3, 5], "margin": 80.0, "completion_radius": 30.0},
    "jamming": {
        "count": [1, 2],
        "radius": [80.0, 140.0],
        "intensity": [60.0, 100.0],
        "margin": 150.0,
        "avoid_strength": 2.0,
    },
    "mesh": {"range": 200.0, "signal_reduction": 0.7, "jam_latency_factor": 3.0},
    "boids": {
        "w_sep": 1.5,
        "w_align": 1.0,
        "w_coh": 1.0,
        "sep_radius": 50.0,
        "align_radius": 100.0,
        "coh_radius": 150.0,
        "max_speed": 3.0,
        "max_force": 0.1,
        "w_goal": 0.5,
        "goal_threshold": 5.0,
    },
    "phone": {"id": "mobile_drone", "speed": 3.0, "yaw_rate": 5.0, "battery": 85.0, "spawn_offset": 100.0},
    "battery": {"master_rate": 0.002, "slave_rate": 0.001, "movement_rate": 0.0005, "jam_rate": 0.001},
    "formation": {"kind": "circle", "spacing": 80.0},
    "timing": {
        "tick": 50.0,
        "heartbeat": 1000.0,
        "heartbeat_timeout": 3000.0,
        "kill_election_delay": 500.0,
        "election_delay": 100.0,
    },
    "election": {"handoff_threshold": 20.0, "min_battery": 10.0, "vote_log_size": 3},
    "events": {"max_events": 50},
}


def deep_update(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: pathlib.Path | None) -> dict:
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    path = pathlib.Path(path)
    cfg = yaml.safe_load(path.read_text())
    if cfg is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")
    if "inherits" in cfg:
        base_cfg = load_config(path.parent / cfg["inherits"])
        cfg = {k: v for k, v in cfg.items() if k != "inherits"}
        return validate(deep_update(base_cfg, cfg))
    return validate(deep_update(DEFAULT_CONFIG, cfg))


def validate(cfg: dict) -> dict:
    kind = cfg["formation"]["kind"]
    try:
        FormationType(kind)
    except ValueError:
        choices = ", ".join(f.value for f in FormationType)
        raise ConfigError(f"unknown formation kind {kind!r} (expected one of {choices})") from None
    for key in ("tick", "heartbeat", "heartbeat_timeout"):
        if cfg["timing"][key] <= 0:
            raise ConfigError(f"timing.{key} must be positive")
    if cfg["agents"]["count"] < 0:
        raise ConfigError("agents.count must be >= 0")
    if cfg["events"]["max_events"] <= 0:
        raise ConfigError("events.max_events must be positive")
    return cfg
