from dataclasses import dataclass


@dataclass(frozen=True)
class CardView:
    id: int
    suit: str
    rank: int
    face_up: bool
    label: str


@dataclass(frozen=True)
class StackView:
    cards: tuple[CardView, ...]


@dataclass(frozen=True)
class GameViewModel:
    stock_count: int
    foundation_count: int
    undo_used: int
    status: str
    stacks: tuple[StackView, ...]


@dataclass(frozen=True)
class AnimationEvent:
    type: str
    payload: dict
