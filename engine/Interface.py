from engine.Core import GameState
from shell.view_model import AnimationEvent


class Interface:

    def __init__(self):
        self.session = None

    def onStart(self, state: GameState):
        self.notifyRedraw()

    def onEvent(self, event: AnimationEvent):
        """
        Invoked for each event of an accepted engine transition.
        :param event:
        :return:
        """
        pass

    def onChange(self, prev: GameState, state: GameState):
        """
        Invoked once per accepted transition, after its events.
        :param prev: the state before the transition
        :param state: the new current state
        :return:
        """
        self.notifyRedraw()

    def notifyRedraw(self):
        pass

    def onWin(self):
        pass

    def onStuck(self):
        pass
