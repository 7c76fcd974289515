from core.config import BASE_URL, API_TOKEN, USERNAME, PASSWORD
from core.exceptions import VikunjaError
from core.logs import get_logger
from storage.vikunja import VikunjaClient
from controller.app_controller import AppController

log = get_logger("app")


def main():
    client = VikunjaClient(BASE_URL, token=API_TOKEN or None)
    if not API_TOKEN:
        try:
            client.login(USERNAME, PASSWORD)
        except VikunjaError as e:
            # no token, no point in opening the window
            log.error("Login error: %s", e)
            return 1

    from gui.main_window import MainWindow

    controller = AppController(client)
    ui = MainWindow(controller)
    ui.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
