import logging
import sys
from pathlib import Path

from loguru import logger

from src.onboarding.runtime.config.config_data import ConfigData, LoggingConfig

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Extra keys whose values never reach a sink
REDACTED_EXTRAS = frozenset({"secret", "password", "token", "authorization"})

NOISY_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records (uvicorn, httpx) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # access lines come from the request logging middleware instead
        if record.name == "uvicorn.access":
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _patch_record(record) -> None:
    extra = record["extra"]
    extra.setdefault("request_id", "-")
    for key in REDACTED_EXTRAS.intersection(extra):
        extra[key] = "***"


def _add_file_sink(cfg: LoggingConfig, verbose_errors: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        # serialize=True writes the whole record as JSON; the format is ignored
        format="{message}" if as_json else PLAIN_FORMAT,
        serialize=as_json,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=verbose_errors,
        diagnose=verbose_errors,
    )


def configure_logging(config: ConfigData) -> None:
    """Install loguru sinks for the process and route stdlib logging into them.

    Safe to call more than once; existing sinks are replaced.
    """
    cfg = config.logging
    environment = config.app.environment
    # variable values in tracebacks could include secrets
    verbose_errors = environment != "production"

    logger.remove()
    logger.configure(extra={"request_id": "-"}, patcher=_patch_record)

    logger.add(
        sys.stderr,
        level=cfg.level,
        format=PLAIN_FORMAT,
        colorize=True,
        backtrace=verbose_errors,
        diagnose=verbose_errors,
    )
    if cfg.file:
        _add_file_sink(cfg, verbose_errors)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict):
        std_logger = logging.getLogger(name)
        std_logger.handlers = []
        std_logger.propagate = True
    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    logger.bind(
        log_level=cfg.level,
        log_format=cfg.format,
        log_file=cfg.file,
        environment=environment,
    ).info("Logging configured")
