import itertools
import random
from dataclasses import dataclass, replace

PLAYING = "playing"
WON = "won"

COLUMN_COUNT = 10
DEAL_SIZE = COLUMN_COUNT
RUN_LENGTH = 13
PILE_COUNT = 8
DECK_SIZE = RUN_LENGTH * PILE_COUNT
UNDO_LIMIT = 3
# columns 0-3 get 6 cards, the rest 5, 54 in total
INITIAL_COLUMN_SIZES = (6, 6, 6, 6, 5, 5, 5, 5, 5, 5)

SUITS = "SHDC"
SUIT_SYMBOLS = {"S": "♠", "H": "♥", "D": "♦", "C": "♣"}
DIFFICULTY_SUITS = {1: "S", 2: "SH", 4: "SHDC"}

_cardIds = itertools.count(1)


def lastOf(lst):
    return lst[len(lst) - 1]


def rankLabel(rank: int) -> str:
    if rank == 1:
        return "A"
    if rank == 11:
        return "J"
    if rank == 12:
        return "Q"
    if rank == 13:
        return "K"
    return str(rank)


def suitLabel(suit: str) -> str:
    return SUIT_SYMBOLS.get(suit, "♣")


@dataclass(frozen=True, slots=True)
class Card:
    id: int
    suit: str
    rank: int
    faceUp: bool = False

    def gameStr(self):
        if not self.faceUp:
            return "---"
        return suitLabel(self.suit) + rankLabel(self.rank)

    def turned(self, faceUp=True):
        if self.faceUp == faceUp:
            return self
        return replace(self, faceUp=faceUp)

    def suitableAsBaseFor(self, upper):
        return self.rank == upper.rank + 1

    def suitableAsSequenceFor(self, upper):
        return self.suit == upper.suit and self.rank == upper.rank + 1

    @staticmethod
    def fromSuitAndRank(suit, rank, faceUp=False):
        return Card(next(_cardIds), suit, rank, faceUp)


Column = tuple[Card, ...]


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """One immutable board state. The unit stored in the undo history."""

    difficulty: int
    columns: tuple[Column, ...]
    stock: Column = ()
    # each pile is bottom-to-top, K first
    foundation: tuple[Column, ...] = ()
    undoUsed: int = 0
    status: str = PLAYING

    def cardCount(self):
        return (
            sum(len(col) for col in self.columns)
            + len(self.stock)
            + sum(len(pile) for pile in self.foundation)
        )


@dataclass(frozen=True, slots=True)
class GameState(GameSnapshot):
    # oldest first
    history: tuple[GameSnapshot, ...] = ()

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            difficulty=self.difficulty,
            columns=self.columns,
            stock=self.stock,
            foundation=self.foundation,
            undoUsed=self.undoUsed,
            status=self.status,
        )


@dataclass(frozen=True, slots=True)
class Pick:
    fromColumn: int
    fromIndex: int


def buildDeck(difficulty: int, rng: random.Random = None) -> list[Card]:
    """
    Build the 104 face-down cards for a difficulty and shuffle them.
    :param difficulty: number of suits in play, 1, 2 or 4
    :param rng: source of randomness, the module-level generator when omitted
    """
    try:
        suits = DIFFICULTY_SUITS[difficulty]
    except KeyError:
        raise ValueError(f"unsupported difficulty: {difficulty!r}") from None
    copies = PILE_COUNT // len(suits)
    deck = []
    for suit in suits:
        for _ in range(copies):
            for rank in range(1, RUN_LENGTH + 1):
                deck.append(Card.fromSuitAndRank(suit, rank))
    # random.shuffle is Fisher-Yates
    (rng or random).shuffle(deck)
    return deck


def dealInitial(deck):
    """
    Lay out the tableau: 6 cards on columns 0-3, 5 on columns 4-9, top cards face up.
    :return: (columns, stock), the stock keeps the remaining deck order
    """
    columns = []
    idx = 0
    for size in INITIAL_COLUMN_SIZES:
        dealt = list(deck[idx:idx + size])
        idx += size
        dealt[-1] = dealt[-1].turned()
        columns.append(tuple(dealt))
    return tuple(columns), tuple(deck[idx:])


def newGame(difficulty: int = 2, rng: random.Random = None) -> GameState:
    columns, stock = dealInitial(buildDeck(difficulty, rng))
    return GameState(difficulty=difficulty, columns=columns, stock=stock)


def _isValidColumn(columns, col):
    return isinstance(col, int) and 0 <= col < len(columns)


def canPickStack(columns, fromCol: int, fromIndex: int) -> bool:
    """
    Whether the cards from `fromIndex` to the top form a movable sequence:
    all face up and ranks descending by one. Suits may be mixed.
    """
    if not _isValidColumn(columns, fromCol):
        return False
    column = columns[fromCol]
    if not isinstance(fromIndex, int) or fromIndex < 0 or fromIndex >= len(column):
        return False
    base = column[fromIndex]
    if not base.faceUp:
        return False
    for i in range(fromIndex + 1, len(column)):
        upper = column[i]
        if not upper.faceUp or not base.suitableAsBaseFor(upper):
            return False
        base = upper
    return True


def canDropStack(columns, targetCol: int, stack) -> bool:
    if not _isValidColumn(columns, targetCol):
        return False
    if len(stack) == 0:
        return False
    target = columns[targetCol]
    if len(target) == 0:
        return True
    return lastOf(target).suitableAsBaseFor(stack[0])


def _revealTop(column):
    if len(column) == 0 or lastOf(column).faceUp:
        return column
    return column[:-1] + (lastOf(column).turned(),)


def isCompletedRun(cards) -> bool:
    """Exactly 13 face-up cards of one suit, K at the bottom down to A on top."""
    if len(cards) != RUN_LENGTH:
        return False
    suit = cards[0].suit
    for i, card in enumerate(cards):
        if not card.faceUp or card.suit != suit or card.rank != RUN_LENGTH - i:
            return False
    return True


def autoClearCompleted(state: GameState) -> GameState:
    """
    Move every finished K..A run on a column top into the foundation.
    After each removal the scan restarts from column 0.
    """
    columns = list(state.columns)
    foundation = list(state.foundation)
    changed = True
    while changed:
        changed = False
        for idx, column in enumerate(columns):
            if len(column) < RUN_LENGTH:
                continue
            top = column[len(column) - RUN_LENGTH:]
            if not isCompletedRun(top):
                continue
            columns[idx] = _revealTop(column[:len(column) - RUN_LENGTH])
            foundation.append(top)
            changed = True
            break

    status = WON if len(foundation) == PILE_COUNT else state.status
    if len(foundation) == len(state.foundation) and status == state.status:
        return state
    return replace(state, columns=tuple(columns), foundation=tuple(foundation), status=status)


def _pushHistory(state: GameState) -> tuple[GameSnapshot, ...]:
    return state.history + (state.snapshot(),)


def moveStack(state: GameState, pick: Pick, targetColumn: int) -> GameState:
    """
    Relocate the stack starting at `pick` onto `targetColumn`.
    Returns `state` itself when the move is not allowed.
    """
    if state.status != PLAYING:
        return state
    if targetColumn == pick.fromColumn:
        return state
    columns = state.columns
    if not canPickStack(columns, pick.fromColumn, pick.fromIndex):
        return state
    source = columns[pick.fromColumn]
    moving = source[pick.fromIndex:]
    if not canDropStack(columns, targetColumn, moving):
        return state

    newColumns = list(columns)
    newColumns[pick.fromColumn] = _revealTop(source[:pick.fromIndex])
    newColumns[targetColumn] = columns[targetColumn] + moving
    moved = replace(state, columns=tuple(newColumns), history=_pushHistory(state))
    return autoClearCompleted(moved)


def dealFromStock(state: GameState) -> GameState:
    if state.status != PLAYING:
        return state
    if len(state.stock) < DEAL_SIZE:
        return state

    dealt = state.stock[:DEAL_SIZE]
    newColumns = tuple(col + (dealt[i].turned(),) for i, col in enumerate(state.columns))
    dealtState = replace(
        state,
        columns=newColumns,
        stock=state.stock[DEAL_SIZE:],
        history=_pushHistory(state),
    )
    return autoClearCompleted(dealtState)


def undo(state: GameState) -> GameState:
    """
    Restore the latest history entry. The restored board keeps the session's
    undo counter (plus one), not the counter stored in the entry.
    """
    if state.status != PLAYING:
        return state
    if state.undoUsed >= UNDO_LIMIT:
        return state
    if len(state.history) == 0:
        return state
    prev = lastOf(state.history)
    return GameState(
        difficulty=prev.difficulty,
        columns=prev.columns,
        stock=prev.stock,
        foundation=prev.foundation,
        undoUsed=state.undoUsed + 1,
        status=prev.status,
        history=state.history[:-1],
    )
