"""Application entry point for the Folio auth server."""

from folio.app import App
from folio.config import Config
from folio.logging import setup_logging
from folio.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
