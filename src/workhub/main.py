"""Application entry point for WorkHub backend server."""

from workhub.app import App
from workhub.config import Config
from workhub.logging import setup_logging
from workhub.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
