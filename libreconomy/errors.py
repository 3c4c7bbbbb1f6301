"""
Exception taxonomy for libreconomy.

Only two conditions are errors:
- ConfigurationError: invalid thresholds/weights/reputation settings, raised at
  load time so a simulation never starts with bad configuration.
- InvariantViolation: an internal bug (e.g. a Beta parameter reaching zero).
  Every mutation site clamps, so this should be unreachable.

"No feasible target" is not an exception. The decision engine
records it as a reason on the Decision and degrades the action to Wander.
"""

from typing import Any, Optional


class LibreconomyError(Exception):
    """Base class for all libreconomy errors."""


class ConfigurationError(LibreconomyError, ValueError):
    """Raised when configuration is rejected at load time.

    Carries the offending field/value (when known) along with remediation tips,
    mirroring how simulation-level errors report what to check next.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        lines = [message]
        if field is not None:
            lines.append(f"  Field: {field} (got {value!r})")
        lines.extend(
            [
                "\nRemediation tips:",
                "  - Weights must be non-negative",
                "  - Thresholds must lie within [0, need_max] and critical >= high",
                "  - Decay factor must lie in (0, 1]; evidence weight must be > 0",
                "  - Run Config.display() to inspect environment-driven defaults",
            ]
        )
        super().__init__("\n".join(lines))


class InvariantViolation(LibreconomyError):
    """Raised when a reputation view would leave the alpha > 0, beta > 0 domain."""

    def __init__(
        self,
        *,
        alpha: float,
        beta: float,
        observer: Optional[int] = None,
        subject: Optional[int] = None,
    ) -> None:
        self.alpha = alpha
        self.beta = beta
        self.observer = observer
        self.subject = subject
        pair = ""
        if observer is not None or subject is not None:
            pair = f" for observer={observer} subject={subject}"
        super().__init__(
            f"Reputation invariant violated{pair}: alpha={alpha}, beta={beta} "
            "(both must stay strictly positive). This indicates a bug in an update "
            "or decay path, not a user error."
        )
