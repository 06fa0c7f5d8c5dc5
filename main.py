import logging
import os
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from shapebook.analysis.factory import session_from_settings
from shapebook.settings_models import SETTINGS_ENV_VAR
from shapebook.settings_store import JsonSettingsStore
from shapebook.ui.primer_window import PrimerWindow

logger = logging.getLogger(__name__)


def _split_startup_args(argv: list[str]) -> tuple[list[str], bool]:
    filtered: list[str] = []
    verbose = False
    for arg in argv:
        if arg in {"-v", "--verbose"}:
            verbose = True
            continue
        filtered.append(arg)
    return filtered, verbose


def _load_startup_settings() -> JsonSettingsStore:
    store = JsonSettingsStore.default()
    store.load()
    if store.dirty:
        try:
            store.save()
        except Exception as exc:
            logger.warning("Could not write default settings: %s", exc)
    return store


if __name__ == "__main__":
    cli_args, verbose = _split_startup_args(sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if cli_args and Path(cli_args[0]).suffix == ".json":
        os.environ[SETTINGS_ENV_VAR] = str(Path(cli_args.pop(0)).expanduser().resolve())

    settings = _load_startup_settings()
    session = session_from_settings(settings)
    logger.info("Analyzer: %s", type(session.analyzer).__name__)

    app = QApplication([sys.argv[0], *cli_args])
    app.setStyle("Fusion")
    app.setApplicationName(PrimerWindow.APP_NAME)
    window = PrimerWindow(session, settings)
    if settings.last_error:
        window.statusBar().showMessage(f"Settings ignored: {settings.last_error}")
    window.show()
    sys.exit(app.exec())
