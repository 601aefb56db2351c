"""Allow running Pomotray as a module: python -m pomotray."""

import logging
import os
import sys

from PyQt6.QtCore import QCoreApplication

from .controller import TimerController
from .display import status_text


logger = logging.getLogger("pomotray")


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("POMOTRAY_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QCoreApplication(sys.argv)
    app.setApplicationName("Pomotray")
    app.setOrganizationName("Pomotray")

    controller = TimerController(parent=app)
    state = controller.load()
    controller.phase_changed.connect(
        lambda s: logger.info("%s", status_text(s))
    )

    if os.environ.get("POMOTRAY_AUTOSTART") == "1":
        state = controller.start()
    controller.start_ticking()
    logger.info("Pomotray ready: %s", status_text(state))

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
