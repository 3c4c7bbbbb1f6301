"""
Example 1: Meadow Market - Full Tick Loop From a JSON Scenario
==============================================================

WHAT THIS SHOWS:
- Loading species, agents, world and configuration from JSON
- Needs decay -> decisions -> execution -> reputation update -> decay
- Herbivores grazing, humans trading, hiring and hunting
- Tick listeners for custom analysis
- Final trust table per observer

RUN:
    python -m examples.meadow.run
    LIBRECONOMY_VERBOSE=true python -m examples.meadow.run   # per-decision output
    DEFAULT_TICK_COUNT=20 python -m examples.meadow.run      # shorter run
"""

from libreconomy import Config, ScenarioLoader, TickReport


def main() -> None:
    Config.validate()
    scenario = ScenarioLoader().load("meadow")
    print(f"{scenario.name}: {scenario.description}\n")

    degraded = []

    def count_degraded(report: TickReport) -> None:
        degraded.extend(d for d in report.decisions if d.degraded)

    simulation = scenario.build_simulation(tick_listeners=[count_degraded])
    result = simulation.run()

    print(f"\nEvents processed: {result['events_processed']}")
    print(f"Decisions degraded to Wander: {len(degraded)}")
    print(f"Agents alive: {result['agents']}")

    book = simulation.reputation
    for agent_id in sorted(simulation.agents):
        ranked = book.most_trusted(agent_id, 3)
        if ranked:
            table = ", ".join(f"{subject}={score:.2f}" for subject, score in ranked)
            print(f"  Agent {agent_id} trusts: {table}")


if __name__ == "__main__":
    main()
