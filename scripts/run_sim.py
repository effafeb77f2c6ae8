import argparse
import logging
import pathlib
import sys

# Ensure repository root is on PYTHONPATH when running without installation.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from skyswarm.config import load_config
from skyswarm.core.simulator import Simulator
from skyswarm.viz.logger import SwarmLogger


def parse_commands(entries):
    """
    "1500:kill_master" -> (1500.0, "kill_master", None)
    "3000:formation=grid" -> (3000.0, "formation", "grid")
    """
    commands = []
    for entry in entries or []:
        at, _, action = entry.partition(":")
        name, _, arg = action.partition("=")
        commands.append((float(at), name, arg or None))
    return sorted(commands, key=lambda c: c[0])


def apply_command(sim: Simulator, name: str, arg):
    if name == "kill_master":
        sim.kill_master()
    elif name == "formation":
        sim.set_formation(arg)
    elif name == "mission":
        sim.toggle_mission()
    elif name == "pause":
        sim.pause()
    elif name == "resume":
        sim.resume()
    elif name == "phone_connect":
        sim.connect_phone()
    elif name == "phone_disconnect":
        sim.disconnect_phone()
    else:
        raise SystemExit(f"unknown command: {name}")


def main():
    parser = argparse.ArgumentParser(description="Run the swarm engine headless.")
    parser.add_argument("--config", type=pathlib.Path, help="Path to YAML config.")
    parser.add_argument("--seed", type=int, help="Override scenario seed.")
    parser.add_argument("--duration", type=float, default=10000.0, help="Simulated milliseconds to run.")
    parser.add_argument("--log", type=pathlib.Path, help="Optional path to write JSON log.")
    parser.add_argument("--log-every", type=float, default=1000.0, dest="log_every", help="Snapshot period (ms).")
    parser.add_argument("--mission", action="store_true", help="Start the mission at t=0.")
    parser.add_argument(
        "--at",
        action="append",
        metavar="MS:COMMAND[=ARG]",
        help="Scripted command, e.g. 2000:kill_master or 0:formation=grid. Repeatable.",
    )
    parser.add_argument("--log-level", default="INFO", dest="log_level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    cfg = load_config(args.config)
    sim = Simulator.from_config(cfg, seed=args.seed)
    logger = SwarmLogger(args.log) if args.log else None
    if args.mission:
        sim.start_mission()

    commands = parse_commands(args.at)
    t = 0.0
    while t < args.duration:
        t = min(t + args.log_every, args.duration)
        while commands and commands[0][0] <= t:
            at, name, arg = commands.pop(0)
            sim.run_until(at)
            apply_command(sim, name, arg)
        sim.run_until(t)
        if logger:
            logger.log_state(sim.state, sim.metrics(), sim.events.to_list())

    m = sim.metrics()
    print(f"t={sim.now / 1000:.1f}s master={sim.state.master_id} elections={m['elections']}")
    print(
        f"active={m['active_agents']}/{m['total_agents']} avg_battery={m['average_battery']:.1f}% "
        f"jammed={m['jammed_agents']} targets_completed={m['targets_completed']}"
    )
    for e in reversed(sim.events.to_list()):
        print(f"  [{e.timestamp:>8.0f}] {e.kind.value:<18} {e.details}")

    if logger:
        logger.flush()


if __name__ == "__main__":
    main()
