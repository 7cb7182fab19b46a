"""Application entry point for the todo web service."""

import sys

import pydantic

from todoapp.app import App
from todoapp.config import Config
from todoapp.errors import ConfigurationError
from todoapp.logging import setup_logging
from todoapp.web.runner import run_server


def main() -> None:
    try:
        config = Config()
    except (ConfigurationError, pydantic.ValidationError) as e:
        sys.exit(f"Configuration error: {e}")

    setup_logging(config.debug)
    run_server(App(config), config)


if __name__ == "__main__":
    main()
