from engine.Core import WON, GameState
from shell.view_model import AnimationEvent, CardView, GameViewModel, StackView
from solver.autocomplete import Move


class CoreAdapter:
    """Bridges engine states and state transitions to a renderer-friendly model."""

    @staticmethod
    def snapshot(state: GameState) -> GameViewModel:
        stacks = []
        for column in state.columns:
            cards = tuple(
                CardView(id=card.id, suit=card.suit, rank=card.rank, face_up=card.faceUp, label=card.gameStr())
                for card in column
            )
            stacks.append(StackView(cards=cards))
        return GameViewModel(
            stock_count=len(state.stock),
            foundation_count=len(state.foundation),
            undo_used=state.undoUsed,
            status=state.status,
            stacks=tuple(stacks),
        )

    @staticmethod
    def move_to_animation(move: Move) -> AnimationEvent:
        return AnimationEvent(
            type="MOVE",
            payload={"src": (move.fromColumn, move.fromIndex), "dest": move.toColumn},
        )

    @staticmethod
    def describe_change(prev: GameState, nxt: GameState, move: Move = None) -> list[AnimationEvent]:
        """
        Translate one engine transition into animation events.
        An unchanged state (the engine's rejection signal) yields no events.
        """
        if prev is nxt:
            return []
        events = []
        if len(nxt.history) < len(prev.history):
            events.append(AnimationEvent(type="UNDO", payload={"undo_used": nxt.undoUsed}))
            return events
        if len(nxt.stock) < len(prev.stock):
            events.append(AnimationEvent(type="DEAL", payload={"draw_count": len(prev.stock) - len(nxt.stock)}))
        elif move is not None:
            events.append(CoreAdapter.move_to_animation(move))
        else:
            events.append(AnimationEvent(type="MOVE", payload={}))

        for pile_idx in range(len(prev.foundation), len(nxt.foundation)):
            events.append(
                AnimationEvent(
                    type="COMPLETE_SUIT",
                    payload={"pile": pile_idx, "suit": nxt.foundation[pile_idx][0].suit},
                )
            )
        if nxt.status == WON and prev.status != WON:
            events.append(AnimationEvent(type="WIN", payload={"foundation": len(nxt.foundation)}))
        return events
