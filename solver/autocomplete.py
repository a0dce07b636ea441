from __future__ import annotations

import argparse
import json
import random
from dataclasses import dataclass
from typing import Iterator, Optional

from engine.Core import (
    PLAYING,
    WON,
    GameState,
    Pick,
    canDropStack,
    canPickStack,
    dealFromStock,
    moveStack,
    newGame,
)

MIN_ITERATIONS = 500


@dataclass(frozen=True, slots=True)
class Move:
    """A single stack relocation in solver notation."""

    fromColumn: int
    fromIndex: int
    toColumn: int

    def pick(self) -> Pick:
        return Pick(self.fromColumn, self.fromIndex)

    def to_notation(self) -> str:
        return f"S{self.fromColumn}:{self.fromIndex}->S{self.toColumn}"


def _is_single_suit(stack) -> bool:
    suit = stack[0].suit
    return all(card.suit == suit for card in stack)


def _pickable_stacks(columns) -> Iterator[tuple[int, int, tuple]]:
    """Yield (column, index, stack) for every pickable stack, lowest column and index first."""
    for from_col, column in enumerate(columns):
        for from_idx in range(len(column)):
            if canPickStack(columns, from_col, from_idx):
                yield from_col, from_idx, column[from_idx:]


def iter_legal_moves(state: GameState) -> Iterator[Move]:
    columns = state.columns
    for from_col, from_idx, stack in _pickable_stacks(columns):
        for to_col in range(len(columns)):
            if to_col == from_col:
                continue
            if canDropStack(columns, to_col, stack):
                yield Move(from_col, from_idx, to_col)


def has_any_move(state: GameState) -> bool:
    """True when a deal is available or any stack can be relocated."""
    if len(state.stock) > 0:
        return True
    return next(iter_legal_moves(state), None) is not None


def state_signature(state: GameState) -> str:
    return "|".join(",".join(f"{card.rank}{card.suit}" for card in column) for column in state.columns)


def can_auto_complete(state: GameState) -> bool:
    if len(state.stock) > 0 or state.status != PLAYING:
        return False
    for column in state.columns:
        for card in column:
            if not card.faceUp:
                return False
        for i in range(len(column) - 1):
            if not column[i].suitableAsSequenceFor(column[i + 1]):
                return False
    return True


def _find_same_suit_merge(columns) -> Optional[Move]:
    for from_col, from_idx, stack in _pickable_stacks(columns):
        if not _is_single_suit(stack):
            continue
        suit = stack[0].suit
        for to_col, target in enumerate(columns):
            if to_col == from_col:
                continue
            if not canDropStack(columns, to_col, stack):
                continue
            if len(target) > 0 and target[-1].suit == suit:
                return Move(from_col, from_idx, to_col)
    return None


def _find_empty_column_move(columns) -> Optional[Move]:
    empty_col = next((i for i, column in enumerate(columns) if len(column) == 0), -1)
    if empty_col < 0:
        return None

    same_suit = [
        (from_col, from_idx, stack)
        for from_col, from_idx, stack in _pickable_stacks(columns)
        if _is_single_suit(stack)
    ]
    # A king-led run frees its column for later merges.
    for from_col, from_idx, stack in same_suit:
        if stack[0].rank == 13:
            return Move(from_col, from_idx, empty_col)

    for from_col, from_idx, stack in same_suit:
        bottom = stack[0]
        for col_idx, column in enumerate(columns):
            if col_idx in (from_col, empty_col) or len(column) == 0:
                continue
            top = column[-1]
            if top.suit == bottom.suit and top.rank == bottom.rank + 1:
                return Move(from_col, from_idx, empty_col)
    return None


def find_auto_complete_move(state: GameState) -> Optional[Move]:
    """
    Pick the next autocomplete move by priority:
    same-suit merge, same-suit run into an empty column, then any legal move.
    """
    columns = state.columns
    move = _find_same_suit_merge(columns)
    if move is None:
        move = _find_empty_column_move(columns)
    if move is None:
        move = next(iter_legal_moves(state), None)
    return move


def build_auto_complete_sequence(state: GameState, max_iterations: int = MIN_ITERATIONS) -> list[Move]:
    """
    Greedily plan moves on a working copy of `state`.

    Replaying the returned moves with `moveStack` from `state` reaches the same
    board the planner ended on. Planning stops when the game is won, no move
    qualifies, a move is rejected, or the iteration cap is reached.
    """
    moves: list[Move] = []
    current = state
    for _ in range(max(MIN_ITERATIONS, max_iterations)):
        if current.status == WON:
            break
        move = find_auto_complete_move(current)
        if move is None:
            break
        nxt = moveStack(current, move.pick(), move.toColumn)
        if nxt is current:
            break
        moves.append(move)
        current = nxt
    return moves


def replay(state: GameState, moves) -> GameState:
    for move in moves:
        state = moveStack(state, move.pick(), move.toColumn)
    return state


def play_seed(seed: int, difficulty: int = 1, max_iterations: int = MIN_ITERATIONS) -> dict:
    """Play a seeded game headlessly: autocomplete, deal, repeat until nothing changes."""
    state = newGame(difficulty, random.Random(seed))
    move_count = 0
    deal_count = 0
    while state.status == PLAYING:
        moves = build_auto_complete_sequence(state, max_iterations)
        state = replay(state, moves)
        move_count += len(moves)
        dealt = dealFromStock(state)
        if dealt is state:
            break
        deal_count += 1
        state = dealt
    return {
        "seed": seed,
        "difficulty": difficulty,
        "status": state.status,
        "moves": move_count,
        "deals": deal_count,
        "foundation": len(state.foundation),
        "stock_left": len(state.stock),
        "stuck": state.status == PLAYING and not has_any_move(state),
    }


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play seeded Spider games with the greedy autocomplete planner.")
    parser.add_argument("--seed", type=int, action="append", required=True, help="Seed to play; can be repeated.")
    parser.add_argument("--difficulty", type=int, choices=(1, 2, 4), default=1, help="Suit count.")
    parser.add_argument(
        "--max-iterations", type=int, default=MIN_ITERATIONS, help="Planner iteration cap per sequence."
    )
    parser.add_argument("--pretty", action="store_true", help="Pretty-print json output.")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    payload = [play_seed(seed, args.difficulty, args.max_iterations) for seed in args.seed]
    if len(payload) == 1:
        payload = payload[0]

    if args.pretty:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(payload, ensure_ascii=False))


if __name__ == "__main__":
    main()
