"""Uvicorn server runner with custom configuration."""

import structlog
import uvicorn
from uvicorn.config import LOGGING_CONFIG

from workhub.app import App
from workhub.config import Config
from workhub.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)


def run_server(app: App, config: Config) -> None:
    """Run the Uvicorn server; access lines are plain text next to the structlog output."""
    fastapi_app = create_fastapi_app(app, config)

    log_config = LOGGING_CONFIG.copy()
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"

    logger.info(
        "server_starting",
        host=config.host,
        port=config.port,
        admin_token_set=config.admin_token is not None,
        commit=config.git_commit_hash,
    )
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=log_config,
        log_level="debug" if config.debug else "info",
        access_log=config.debug,
    )
