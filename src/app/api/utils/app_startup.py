import logging
import sys
from pathlib import Path

from loguru import logger

from src.app.runtime.config.config_data import LoggingConfig
from src.app.runtime.context import get_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers forwarded at a reduced level
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "multipart": logging.WARNING,
    "python_multipart": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records (uvicorn, SQLAlchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # The request middleware writes its own access lines
        if record.name == "uvicorn.access":
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_file_sink(cfg: LoggingConfig, verbose_traces: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        format="{message}" if as_json else CONSOLE_FORMAT,
        serialize=as_json,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=verbose_traces,
        diagnose=verbose_traces,
    )


def _intercept_stdlib() -> None:
    # level=0 hands every record to loguru, which applies the sink levels
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging() -> None:
    """Route all service logging through loguru.

    Records carry a ``request_id`` (``-`` outside a request) and the service
    name. A rotating file sink is added when ``logging.file`` is set.
    """
    main_config = get_config()
    cfg = main_config.logging
    env = main_config.app.environment
    verbose_traces = env != "production"

    logger.remove()
    logger.configure(extra={"request_id": "-", "service": main_config.app.name})

    logger.add(
        sys.stderr,
        level=cfg.level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=verbose_traces,
        diagnose=verbose_traces,
    )
    if cfg.file:
        _add_file_sink(cfg, verbose_traces)

    _intercept_stdlib()

    logger.info(
        "Logging configured for {} ({} environment, level {}, file {})",
        main_config.app.name,
        env,
        cfg.level,
        cfg.file or "none",
    )
