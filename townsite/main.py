import logging
import sys

from PyQt6 import QtWidgets

from .config import load_config
from .ui.main_window import MainWindow

if sys.platform == "win32":
    try:
        import ctypes
        ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID(
            "Townsite.Editor")
    except (ImportError, AttributeError, OSError):
        pass


def main() -> int:
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QtWidgets.QApplication(sys.argv)
    win = MainWindow(config)
    win.show()
    win.open_settlement_dialog()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
