import random
import unittest
from collections import Counter
from dataclasses import replace

from engine.Core import (
    DECK_SIZE,
    PLAYING,
    WON,
    Card,
    Pick,
    autoClearCompleted,
    buildDeck,
    canDropStack,
    canPickStack,
    dealFromStock,
    dealInitial,
    moveStack,
    newGame,
    rankLabel,
    suitLabel,
    undo,
)
from card_fixtures import hidden, make_state, run, visible


class DeckTestCase(unittest.TestCase):
    def test_build_deck_distribution_per_difficulty(self):
        expected_suits = {1: "S", 2: "SH", 4: "SHDC"}
        for difficulty, suits in expected_suits.items():
            deck = buildDeck(difficulty)
            self.assertEqual(DECK_SIZE, len(deck))
            self.assertEqual(DECK_SIZE, len({card.id for card in deck}))
            self.assertTrue(all(not card.faceUp for card in deck))
            counts = Counter((card.suit, card.rank) for card in deck)
            copies = 8 // len(suits)
            self.assertEqual({(s, r): copies for s in suits for r in range(1, 14)}, dict(counts))

    def test_build_deck_rejects_unknown_difficulty(self):
        with self.assertRaises(ValueError):
            buildDeck(3)

    def test_card_ids_are_never_reused(self):
        first = buildDeck(1)
        second = buildDeck(1)
        self.assertFalse({c.id for c in first} & {c.id for c in second})

    def test_seeded_deck_is_deterministic(self):
        a = [(c.suit, c.rank) for c in buildDeck(4, random.Random(20260210))]
        b = [(c.suit, c.rank) for c in buildDeck(4, random.Random(20260210))]
        self.assertEqual(a, b)

    def test_deal_initial_layout(self):
        deck = buildDeck(2)
        columns, stock = dealInitial(deck)
        self.assertEqual([6, 6, 6, 6, 5, 5, 5, 5, 5, 5], [len(col) for col in columns])
        self.assertEqual(50, len(stock))
        self.assertEqual([c.id for c in deck[54:]], [c.id for c in stock])
        self.assertEqual([c.id for c in deck[:6]], [c.id for c in columns[0]])
        for column in columns:
            self.assertTrue(column[-1].faceUp)
            self.assertTrue(all(not c.faceUp for c in column[:-1]))
        self.assertTrue(all(not c.faceUp for c in stock))

    def test_new_game_one_suit(self):
        state = newGame(1)
        self.assertEqual(50, len(state.stock))
        self.assertEqual(54, sum(len(col) for col in state.columns))
        self.assertEqual([6] * 4 + [5] * 6, [len(col) for col in state.columns])
        self.assertTrue(all(c.suit == "S" for col in state.columns for c in col))
        self.assertEqual(PLAYING, state.status)
        self.assertEqual(0, state.undoUsed)
        self.assertEqual((), state.history)


class LegalityTestCase(unittest.TestCase):
    def test_pick_mixed_suit_descending_run(self):
        columns = make_state([[visible("S", 7), visible("H", 6), visible("S", 5)]]).columns
        self.assertTrue(canPickStack(columns, 0, 0))
        self.assertTrue(canPickStack(columns, 0, 2))

    def test_pick_rejects_face_down_and_gaps(self):
        columns = make_state(
            [
                [hidden("S", 7), visible("S", 6)],
                [visible("S", 9), visible("S", 7)],
            ]
        ).columns
        self.assertFalse(canPickStack(columns, 0, 0))
        self.assertTrue(canPickStack(columns, 0, 1))
        self.assertFalse(canPickStack(columns, 1, 0))

    def test_pick_rejects_out_of_range(self):
        columns = make_state([[visible("S", 7)]]).columns
        self.assertFalse(canPickStack(columns, 0, 1))
        self.assertFalse(canPickStack(columns, 0, -1))
        self.assertFalse(canPickStack(columns, 10, 0))
        self.assertFalse(canPickStack(columns, -1, 0))
        self.assertFalse(canPickStack(columns, 1, 0))

    def test_drop_rules(self):
        columns = make_state([[visible("H", 8)], []]).columns
        self.assertTrue(canDropStack(columns, 0, (visible("S", 7),)))
        self.assertFalse(canDropStack(columns, 0, (visible("S", 6),)))
        self.assertTrue(canDropStack(columns, 1, (visible("S", 2),)))
        self.assertFalse(canDropStack(columns, 1, ()))
        self.assertFalse(canDropStack(columns, 12, (visible("S", 7),)))


class MoveTestCase(unittest.TestCase):
    def test_move_stack_relocates_and_reveals(self):
        below = hidden("S", 2)
        state = make_state([[below, visible("S", 5), visible("H", 4)], [visible("D", 6)]])
        moved = moveStack(state, Pick(0, 1), 1)
        self.assertIsNot(moved, state)
        self.assertEqual([6, 5, 4], [c.rank for c in moved.columns[1]])
        self.assertEqual(1, len(moved.columns[0]))
        self.assertEqual(below.id, moved.columns[0][0].id)
        self.assertTrue(moved.columns[0][0].faceUp)
        self.assertEqual(1, len(moved.history))
        self.assertEqual(state.snapshot(), moved.history[0])
        # the input value is untouched
        self.assertFalse(state.columns[0][0].faceUp)
        self.assertEqual(3, len(state.columns[0]))

    def test_move_preserves_card_identity(self):
        state = make_state([[visible("S", 5), visible("S", 4)], [visible("S", 6)]])
        ids = [c.id for c in state.columns[0]]
        moved = moveStack(state, Pick(0, 0), 1)
        self.assertEqual(ids, [c.id for c in moved.columns[1][1:]])

    def test_illegal_moves_return_same_state(self):
        state = make_state([[hidden("S", 9), visible("S", 5)], [visible("S", 9)]])
        self.assertIs(state, moveStack(state, Pick(0, 0), 1))
        self.assertIs(state, moveStack(state, Pick(0, 1), 1))
        self.assertIs(state, moveStack(state, Pick(0, 1), 0))
        self.assertIs(state, moveStack(state, Pick(0, 5), 2))
        self.assertIs(state, moveStack(state, Pick(11, 0), 2))
        again = moveStack(moveStack(state, Pick(0, 0), 1), Pick(0, 0), 1)
        self.assertIs(state, again)

    def test_move_to_empty_column(self):
        state = make_state([[visible("S", 3), visible("S", 2)]])
        moved = moveStack(state, Pick(0, 0), 5)
        self.assertEqual(0, len(moved.columns[0]))
        self.assertEqual([3, 2], [c.rank for c in moved.columns[5]])

    def test_won_state_ignores_moves(self):
        state = make_state([[visible("S", 3)], [visible("S", 4)]], status=WON)
        self.assertIs(state, moveStack(state, Pick(0, 0), 1))
        self.assertIs(state, dealFromStock(state))

    def test_won_state_ignores_undo(self):
        board = make_state([[visible("S", 3)], [visible("S", 4)]])
        state = replace(board, status=WON, history=(board.snapshot(),))
        self.assertIs(state, undo(state))
        self.assertEqual(0, state.undoUsed)


class DealTestCase(unittest.TestCase):
    def test_deal_one_card_per_column(self):
        state = newGame(2, random.Random(7))
        front = state.stock[:10]
        dealt = dealFromStock(state)
        self.assertEqual(40, len(dealt.stock))
        for i, column in enumerate(dealt.columns):
            self.assertEqual(len(state.columns[i]) + 1, len(column))
            self.assertEqual(front[i].id, column[-1].id)
            self.assertTrue(column[-1].faceUp)
        self.assertEqual(state.stock[10:], dealt.stock)
        self.assertEqual(1, len(dealt.history))

    def test_deal_needs_ten_cards(self):
        state = make_state([[visible("S", 3)]], stock=[hidden("S", 1) for _ in range(5)])
        self.assertIs(state, dealFromStock(state))

    def test_deal_triggers_auto_clear(self):
        columns = [list(run("S", 13, 2))] + [[visible("H", 9)] for _ in range(9)]
        stock = [hidden("S", 1)] + [hidden("H", 5) for _ in range(9)]
        state = make_state(columns, stock=stock)
        dealt = dealFromStock(state)
        self.assertEqual(1, len(dealt.foundation))
        self.assertEqual(0, len(dealt.columns[0]))
        self.assertEqual(state.cardCount(), dealt.cardCount())


class UndoTestCase(unittest.TestCase):
    def test_undo_round_trip(self):
        state = make_state([[hidden("S", 9), visible("S", 5)], [visible("S", 6)]])
        moved = moveStack(state, Pick(0, 1), 1)
        restored = undo(moved)
        self.assertEqual(state.columns, restored.columns)
        self.assertEqual(state.stock, restored.stock)
        self.assertEqual(state.foundation, restored.foundation)
        self.assertEqual(1, restored.undoUsed)
        self.assertEqual((), restored.history)

    def test_undo_counter_is_not_taken_from_history(self):
        state = newGame(1, random.Random(3))
        dealt = dealFromStock(dealFromStock(state))
        once = undo(dealt)
        twice = undo(once)
        self.assertEqual(2, twice.undoUsed)
        self.assertEqual(state.columns, twice.columns)

    def test_undo_budget(self):
        state = newGame(1, random.Random(11))
        for _ in range(4):
            state = dealFromStock(state)
        for _ in range(3):
            previous = state
            state = undo(state)
            self.assertIsNot(previous, state)
        self.assertEqual(3, state.undoUsed)
        self.assertEqual(1, len(state.history))
        self.assertIs(state, undo(state))

    def test_undo_with_empty_history(self):
        state = newGame(2)
        self.assertIs(state, undo(state))


class AutoClearTestCase(unittest.TestCase):
    def test_move_completing_run_goes_to_foundation(self):
        below = hidden("H", 4)
        state = make_state([[below] + list(run("S", 13, 2)), [visible("S", 1)]])
        moved = moveStack(state, Pick(1, 0), 0)
        self.assertEqual(1, len(moved.foundation))
        self.assertEqual(list(range(13, 0, -1)), [c.rank for c in moved.foundation[0]])
        self.assertEqual(1, len(moved.columns[0]))
        self.assertEqual(below.id, moved.columns[0][0].id)
        self.assertTrue(moved.columns[0][0].faceUp)
        self.assertEqual(PLAYING, moved.status)

    def test_mixed_suit_run_is_not_cleared(self):
        cards = list(run("S", 13, 2)) + [visible("H", 1)]
        state = make_state([cards])
        self.assertIs(state, autoClearCompleted(state))

    def test_clears_every_completed_column(self):
        state = make_state([run("S"), run("H"), [visible("D", 5)]])
        cleared = autoClearCompleted(state)
        self.assertEqual(2, len(cleared.foundation))
        self.assertEqual(["S", "H"], [pile[0].suit for pile in cleared.foundation])
        self.assertEqual(0, len(cleared.columns[0]))
        self.assertEqual(0, len(cleared.columns[1]))

    def test_win_only_with_eight_piles(self):
        seven = [run("S") for _ in range(7)]
        state = make_state([run("S", 13, 2), [visible("S", 1)]], foundation=seven)
        moved = moveStack(state, Pick(1, 0), 0)
        self.assertEqual(8, len(moved.foundation))
        self.assertEqual(WON, moved.status)

        six = [run("S") for _ in range(6)]
        partial = moveStack(make_state([run("S", 13, 2), [visible("S", 1)]], foundation=six), Pick(1, 0), 0)
        self.assertEqual(7, len(partial.foundation))
        self.assertEqual(PLAYING, partial.status)


class ConservationTestCase(unittest.TestCase):
    def test_random_play_keeps_104_cards(self):
        rng = random.Random(42)
        state = newGame(4, random.Random(42))
        for _ in range(300):
            roll = rng.random()
            if roll < 0.1:
                state = dealFromStock(state)
            elif roll < 0.15:
                state = undo(state)
            else:
                pick = Pick(rng.randrange(10), rng.randrange(8))
                state = moveStack(state, pick, rng.randrange(10))
            self.assertEqual(104, state.cardCount())
            for snapshot in state.history:
                self.assertEqual(104, snapshot.cardCount())


class LabelTestCase(unittest.TestCase):
    def test_rank_labels(self):
        self.assertEqual(["A", "2", "10", "J", "Q", "K"], [rankLabel(r) for r in (1, 2, 10, 11, 12, 13)])

    def test_suit_labels(self):
        self.assertEqual("♠♥♦♣", "".join(suitLabel(s) for s in "SHDC"))

    def test_game_str(self):
        self.assertEqual("♥Q", visible("H", 12).gameStr())
        self.assertEqual("---", hidden("H", 12).gameStr())

    def test_face_down_str_does_not_look_like_a_suit(self):
        card = hidden("S", 5)
        self.assertNotEqual(f"{card.id}H", str(card))
        self.assertEqual(repr(card), str(card))

    def test_turned_keeps_identity(self):
        card = Card.fromSuitAndRank("D", 4)
        up = card.turned()
        self.assertEqual((card.id, card.suit, card.rank), (up.id, up.suit, up.rank))
        self.assertTrue(up.faceUp)
        self.assertIs(up, up.turned())


if __name__ == "__main__":
    unittest.main()
