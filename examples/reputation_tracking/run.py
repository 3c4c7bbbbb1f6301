"""
Example 2: Reputation Tracking - Beta Beliefs Without a World
=============================================================

WHAT THIS SHOWS:
- Appending TransactionEvents and HearsayReports to a TransactionLog
- Draining the log into a ReputationBook (symmetric first-hand updates)
- First-hand beliefs overriding hearsay
- Mean-preserving decay shrinking confidence over time
- Risk tolerance discounting sparse evidence when ranking partners

RUN:
    python -m examples.reputation_tracking.run
"""

from libreconomy import (
    HearsayReport,
    Outcome,
    ReputationBook,
    ReputationDecayConfig,
    ReputationDecaySystem,
    ReputationUpdateSystem,
    TargetingConfig,
    TransactionArchive,
    TransactionEvent,
    TransactionLog,
    effective_trust,
)

ALICE, BOB, CAROL = 1, 2, 3


def main() -> None:
    book = ReputationBook()
    log = TransactionLog()
    archive = TransactionArchive()
    updates = ReputationUpdateSystem(archive=archive)
    decay = ReputationDecaySystem(ReputationDecayConfig(decay_factor=0.9, interval=1))

    # Tick 1: Alice and Bob trade well twice, Carol cheats Bob once
    log.append(TransactionEvent.successful_trade(ALICE, BOB, "food", 3.0, tick=1))
    log.append(TransactionEvent.successful_trade(ALICE, BOB, "water", 1.0, tick=1))
    log.append(TransactionEvent.failed_trade(BOB, CAROL, "food", 3.0, tick=1))
    # Bob warns Alice about Carol
    log.append(HearsayReport(observer=ALICE, subject=CAROL, reporter=BOB, outcome=Outcome.NEGATIVE, tick=1))
    updates.run(log, book)

    print("After tick 1:")
    for (observer, subject, provenance), view in book.entries():
        print(
            f"  {observer} -> {subject} [{provenance.value}] "
            f"alpha={view.alpha:.1f} beta={view.beta:.1f} mean={view.mean:.2f}"
        )

    # Tick 2: Alice meets Carol herself and it goes fine
    log.append(TransactionEvent.positive_interaction(ALICE, CAROL, tick=2))
    updates.run(log, book)
    print(f"\nAlice's belief about Carol (first-hand wins): {book.score(ALICE, CAROL):.2f}")

    # Ten quiet ticks of decay
    for tick in range(3, 13):
        decay.run(book, tick)
    view = book.get(ALICE, BOB)
    print(f"Alice -> Bob after decay: mean={view.mean:.2f} confidence={view.confidence:.2f}")

    config = TargetingConfig()
    for risk in (0.0, 0.5, 1.0):
        print(
            f"Effective trust Alice->Bob at risk tolerance {risk}: "
            f"{effective_trust(view, risk, config):.3f}"
        )

    print(f"\nArchived entries: {len(archive)} across ticks {archive.ticks()}")


if __name__ == "__main__":
    main()
