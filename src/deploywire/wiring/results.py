"""Result types for wiring runs."""

from dataclasses import dataclass, field
from typing import List, Literal

WiringAction = Literal["provisioned", "existing", "adopted"]


@dataclass(frozen=True)
class WiringOutcome:
    """How one key was resolved."""

    key: str
    location: str
    action: WiringAction
    pending: bool = False  # post-construction setup still owed


@dataclass
class WiringReport:
    """Outcomes of every Plain/Nicknamed resolution an engine performed."""

    environment: str | None = None
    outcomes: List[WiringOutcome] = field(default_factory=list)

    def record(
        self,
        key: str,
        location: str,
        action: WiringAction,
        *,
        pending: bool = False,
    ) -> WiringOutcome:
        outcome = WiringOutcome(key=key, location=location, action=action, pending=pending)
        self.outcomes.append(outcome)
        return outcome

    def _with(self, action: WiringAction) -> List[WiringOutcome]:
        return [o for o in self.outcomes if o.action == action]

    @property
    def provisioned(self) -> List[WiringOutcome]:
        """Resources materialized during this run."""
        return self._with("provisioned")

    @property
    def existing(self) -> List[WiringOutcome]:
        """Resources already recorded in the environment."""
        return self._with("existing")

    @property
    def adopted(self) -> List[WiringOutcome]:
        """Resources found live at their location but missing from the environment."""
        return self._with("adopted")

    def keys(self) -> List[str]:
        """Distinct keys touched, in first-seen order."""
        seen: List[str] = []
        for outcome in self.outcomes:
            if outcome.key not in seen:
                seen.append(outcome.key)
        return seen

    @property
    def side_effects(self) -> int:
        """Number of materializations performed."""
        return len(self.provisioned)
