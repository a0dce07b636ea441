import random
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from engine.Core import (
    PLAYING,
    UNDO_LIMIT,
    WON,
    GameState,
    Pick,
    dealFromStock,
    moveStack,
    newGame,
    undo,
)
from shell.adapter import CoreAdapter
from solver.autocomplete import (
    MIN_ITERATIONS,
    Move,
    build_auto_complete_sequence,
    can_auto_complete,
    has_any_move,
    iter_legal_moves,
    state_signature,
)


@dataclass
class GameConfig:
    difficulty: int = 2
    seed: Optional[int] = None
    # times one board may be reached before the game counts as stuck
    loopLimit: int = 3
    autoCompleteLimit: int = MIN_ITERATIONS


class Session:
    """
    Holds the current game for a presentation layer.
    ask*** : called by the player, returns whether anything happened.
    """

    def __init__(self):
        self.interface = None
        self.config = GameConfig()
        self.state: GameState = None
        self.signatures = Counter()

    def registerInterface(self, interface):
        self.interface = interface
        interface.session = self

    def startGame(self, config: GameConfig = None):
        if self.interface is None:
            raise RuntimeError("interface is null")
        if config is not None:
            self.config = config
        rng = random.Random(self.config.seed) if self.config.seed is not None else None
        self.loadState(newGame(self.config.difficulty, rng))

    def loadState(self, state: GameState):
        self.state = state
        self.signatures = Counter([state_signature(state)])
        self.interface.onStart(state)

    def gameEnded(self):
        return self.state.status == WON

    def undoLeft(self):
        return max(0, UNDO_LIMIT - self.state.undoUsed)

    def isStuck(self):
        if self.state.status != PLAYING:
            return False
        if not has_any_move(self.state):
            return True
        return self.signatures[state_signature(self.state)] >= self.config.loopLimit

    def canAutoComplete(self):
        return can_auto_complete(self.state)

    def askMove(self, src: (int, int), dest: int) -> bool:
        move = Move(src[0], src[1], dest)
        return self._commit(moveStack(self.state, Pick(src[0], src[1]), dest), move)

    def askDeal(self) -> bool:
        return self._commit(dealFromStock(self.state))

    def askUndo(self) -> bool:
        return self._commit(undo(self.state))

    def askAutoComplete(self) -> int:
        """Replay the planner's sequence one move at a time. Returns the moves applied."""
        moves = build_auto_complete_sequence(self.state, self.config.autoCompleteLimit)
        applied = 0
        for move in moves:
            if not self._commit(moveStack(self.state, move.pick(), move.toColumn), move):
                break
            applied += 1
        return applied

    def hints(self, limit=3) -> list[Move]:
        columns = self.state.columns

        def score(move: Move):
            target = columns[move.toColumn]
            moving = columns[move.fromColumn][move.fromIndex]
            value = len(columns[move.fromColumn]) - move.fromIndex
            if len(target) == 0:
                value -= 8
            elif target[-1].suit == moving.suit:
                value += 20
            if move.fromIndex > 0 and not columns[move.fromColumn][move.fromIndex - 1].faceUp:
                value += 10
            return value

        candidates = list(iter_legal_moves(self.state))
        candidates.sort(key=score, reverse=True)
        return candidates[:limit]

    def _commit(self, nxt: GameState, move: Move = None) -> bool:
        prev = self.state
        if nxt is prev:
            return False
        self.state = nxt
        self.signatures[state_signature(nxt)] += 1
        for event in CoreAdapter.describe_change(prev, nxt, move):
            self.interface.onEvent(event)
        self.interface.onChange(prev, nxt)
        if nxt.status == WON and prev.status != WON:
            self.interface.onWin()
        elif self.isStuck():
            self.interface.onStuck()
        return True
