"""Uvicorn server runner with custom configuration."""

import copy

import structlog
import uvicorn
from uvicorn.config import LOGGING_CONFIG

from todoapp.app import App
from todoapp.config import Config
from todoapp.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)

LOCAL_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})


def build_log_config() -> dict:
    """Uvicorn logging config with shorter formats; the module-level default is left untouched."""
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - %(client_addr)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"
    return log_config


def run_server(app: App, config: Config) -> None:
    """Run the Uvicorn server for the todo API."""
    if not config.cookie_secure and config.host not in LOCAL_HOSTS:
        logger.warning("session_cookies_not_secure", host=config.host)

    fastapi_app = create_fastapi_app(app, config)
    uvicorn.run(fastapi_app, host=config.host, port=config.port, log_config=build_log_config(), access_log=True)
