from __future__ import annotations

import argparse
import logging
import sys
from PySide6 import QtCore, QtWidgets

from .app import App
from .state import UIState

# Qt chatter from the chart crosshair that carries no information.
_SUPPRESSED_QT_MESSAGES = ("QGraphicsItem::itemTransform: null pointer passed",)


def _qt_message_handler(mode, context, message: str) -> None:  # type: ignore[no-untyped-def]
    if any(s in message for s in _SUPPRESSED_QT_MESSAGES):
        return
    sys.stderr.write(message + "\n")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fieldbuddy-gui", description="Field Buddy Pro desktop app")
    p.add_argument("--store", help="Report store file (default ~/.fieldbuddy/reports.json)")
    p.add_argument("--tech", default="", help="Technician name prefilled on reports")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: list[str] | None = None):
    # Unknown arguments are left for Qt (-style, -platform ...).
    args, qt_args = build_parser().parse_known_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    QtCore.qInstallMessageHandler(_qt_message_handler)

    app = QtWidgets.QApplication([sys.argv[0], *qt_args])
    win = App(UIState(tech=args.tech, store_path=args.store))
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
