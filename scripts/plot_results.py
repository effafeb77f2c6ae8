import json
import sys

import matplotlib.pyplot as plt


def load_log(path):
    with open(path, "r") as f:
        return json.load(f)


def main(log_path="logs/sim.json"):
    data = load_log(log_path)
    ts = [entry["t"] / 1000.0 for entry in data]
    battery = [entry["metrics"]["average_battery"] for entry in data]
    active = [entry["metrics"]["active_agents"] for entry in data]
    elections = [entry["metrics"]["elections"] for entry in data]

    fig, axes = plt.subplots(3, 1, sharex=True, figsize=(7, 7))
    axes[0].plot(ts, battery)
    axes[0].set_ylabel("avg battery (%)")
    axes[1].step(ts, active, where="post")
    axes[1].set_ylabel("active agents")
    axes[2].step(ts, elections, where="post")
    axes[2].set_ylabel("elections")
    axes[2].set_xlabel("time (s)")
    axes[0].set_title("Swarm health over time")
    plt.show()


if __name__ == "__main__":
    log = sys.argv[1] if len(sys.argv) > 1 else "logs/sim.json"
    main(log)
