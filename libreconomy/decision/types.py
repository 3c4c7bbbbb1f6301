"""Intent, Action and Decision records produced by the decision engine.

An Intent is a goal for this tick ("find water"). An Action is the concrete,
possibly agent-targeted behaviour the host should execute ("trade with agent
7 for 1 water at 2.0"). A Decision bundles both and never mutates state.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..schemas import AgentId, NeedType
from ..world_query import ResourceLocation


NO_FEASIBLE_TARGET = "no_feasible_target"
"""The winning intent needed another agent but none qualified."""

NO_VISIBLE_RESOURCE = "no_visible_resource"
"""The winning SeekItem intent found nothing to consume or hunt."""


class IntentKind(str, Enum):
    SEEK_ITEM = "seek_item"
    FIND_WORK = "find_work"
    SEEK_TRADE = "seek_trade"
    REST = "rest"
    WANDER = "wander"


class Intent(BaseModel):
    """A scored goal. ``utility`` is what the engine maximised."""

    model_config = ConfigDict(frozen=True)

    kind: IntentKind = Field(..., description="Goal category")
    item_type: Optional[str] = Field(None, description="Item sought or traded")
    need: Optional[NeedType] = Field(None, description="Need this intent addresses")
    urgency: float = Field(0.0, ge=0, le=1, description="Shaped urgency of the addressed need")
    buying: Optional[bool] = Field(None, description="SeekTrade direction")
    skill_types: List[str] = Field(default_factory=list, description="FindWork: skills offered")
    utility: float = Field(0.0, description="Composite utility")
    critical: bool = Field(False, description="Need is at or above its critical threshold")

    @property
    def is_survival(self) -> bool:
        return self.need in (NeedType.THIRST, NeedType.HUNGER)

    @classmethod
    def wander(cls, utility: float) -> "Intent":
        return cls(kind=IntentKind.WANDER, utility=utility)


class ActionKind(str, Enum):
    TRADE = "trade"
    HUNT = "hunt"
    CONSUME = "consume"
    APPLY_FOR_WORK = "apply_for_work"
    REST = "rest"
    WANDER = "wander"


class TradeTerms(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: str = Field(..., description="Item changing hands")
    quantity: int = Field(1, ge=1, description="Units traded")
    price: float = Field(..., ge=0, description="Price per unit")
    buying: bool = Field(..., description="True when the acting agent is the buyer")

    @property
    def total(self) -> float:
        return self.price * self.quantity


class Action(BaseModel):
    """Concrete behaviour for the host to execute this tick."""

    model_config = ConfigDict(frozen=True)

    kind: ActionKind = Field(..., description="Action category")
    target: Optional[AgentId] = Field(None, description="Agent acted upon (trade, hunt, work)")
    terms: Optional[TradeTerms] = Field(None, description="Trade terms")
    item: Optional[str] = Field(None, description="Item consumed")
    # None for Consume means "from own inventory"
    location: Optional[ResourceLocation] = Field(None, description="Where the item lies")
    wage: Optional[float] = Field(None, ge=0, description="Wage asked when applying for work")

    @property
    def is_targeted(self) -> bool:
        return self.target is not None

    @classmethod
    def trade(cls, target: AgentId, terms: TradeTerms) -> "Action":
        return cls(kind=ActionKind.TRADE, target=target, terms=terms)

    @classmethod
    def hunt(cls, target: AgentId) -> "Action":
        return cls(kind=ActionKind.HUNT, target=target)

    @classmethod
    def consume(cls, item: str, location: Optional[ResourceLocation] = None) -> "Action":
        return cls(kind=ActionKind.CONSUME, item=item, location=location)

    @classmethod
    def apply_for_work(cls, target: AgentId, wage: float) -> "Action":
        return cls(kind=ActionKind.APPLY_FOR_WORK, target=target, wage=wage)

    @classmethod
    def rest(cls) -> "Action":
        return cls(kind=ActionKind.REST)

    @classmethod
    def wander(cls) -> "Action":
        return cls(kind=ActionKind.WANDER)


class Decision(BaseModel):
    """One agent's output for one tick."""

    model_config = ConfigDict(frozen=True)

    agent_id: AgentId
    tick: int = Field(0, ge=0)
    intent: Intent
    action: Action
    # Set when the action degraded to Wander (NO_FEASIBLE_TARGET / NO_VISIBLE_RESOURCE)
    reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.reason is not None

    def summary(self) -> str:
        target = f" -> {self.action.target}" if self.action.target is not None else ""
        item = f" [{self.intent.item_type}]" if self.intent.item_type else ""
        note = f" ({self.reason})" if self.reason else ""
        return (
            f"Agent {self.agent_id}: {self.intent.kind.value}{item} "
            f"u={self.intent.utility:.3f} => {self.action.kind.value}{target}{note}"
        )
