import argparse

from engine.Core import COLUMN_COUNT
from engine.Interface import Interface
from engine.Session import Session
from shell import settings_store
from shell.adapter import CoreAdapter

HELP = "commands: mv <col>[:<idx>] <col> | deal | undo | auto | hint | new | quit"


class CommandLineInterface(Interface):

    def printAll(self):
        vm = CoreAdapter.snapshot(self.session.state)
        print(f"Finished: {vm.foundation_count}        Stock: {vm.stock_count}        "
              f"Undo left: {self.session.undoLeft()}")
        print("----" + "----".join(str(i) for i in range(COLUMN_COUNT)) + "---")
        i = 0
        while True:
            has = False
            line = f"{i:>2}: "
            for stack in vm.stacks:
                if len(stack.cards) <= i:
                    line += "     "
                    continue
                has = True
                line += f"{stack.cards[i].label:<3}  "
            if not has:
                break
            print(line.rstrip())
            i += 1
        print()

    def onStart(self, state):
        print("Game started!")
        super().onStart(state)

    def onEvent(self, event):
        if event.type == "COMPLETE_SUIT":
            print("Run completed!")

    def notifyRedraw(self):
        self.printAll()

    def onWin(self):
        print("You win!")

    def onStuck(self):
        print("No useful move left. Type 'new' to start over.")


def parseSource(session: Session, text: str) -> (int, int):
    """`3` means the top card of column 3, `3:2` the stack starting at index 2."""
    if ":" in text:
        col, idx = text.split(":", 1)
        return int(col), int(idx)
    col = int(text)
    return col, len(session.state.columns[col]) - 1


def handleCommand(session: Session, command: str) -> bool:
    """Run one shell command. Returns False when the shell should exit."""
    parts = command.split()
    if not parts:
        return True
    name = parts[0]
    if name == "mv":
        try:
            src = parseSource(session, parts[1])
            dest = int(parts[2])
        except (IndexError, ValueError):
            print("Invalid index!")
            return True
        if not session.askMove(src, dest):
            print("Cannot move!")
    elif name == "deal":
        if not session.askDeal():
            print("Cannot deal!")
    elif name == "undo":
        if not session.askUndo():
            print("Cannot undo!")
    elif name == "auto":
        if session.askAutoComplete() == 0:
            print("Nothing to complete!")
    elif name == "hint":
        hints = session.hints()
        if not hints:
            print("No legal move.")
        for move in hints:
            print(move.to_notation())
    elif name == "new":
        session.startGame()
    elif name in ("quit", "exit"):
        return False
    else:
        print("Invalid command!")
        print(HELP)
    return True


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Spider Solitaire in the terminal.")
    parser.add_argument("--difficulty", type=int, choices=(1, 2, 4), help="Suit count.")
    parser.add_argument("--seed", type=int, help="Deal a reproducible game.")
    parser.add_argument("--config", help="Settings file to read.")
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    settings = settings_store.load_settings(args.config)
    if args.difficulty is not None:
        settings["difficulty"] = str(args.difficulty)
    if args.seed is not None:
        settings["seed"] = str(args.seed)

    interface = CommandLineInterface()
    session = Session()
    session.registerInterface(interface)
    session.startGame(settings_store.build_config(settings))
    print(HELP)
    while True:
        try:
            command = input()
        except EOFError:
            break
        if not handleCommand(session, command):
            break


if __name__ == '__main__':
    main()
