"""Structured logging setup using structlog.

The same processor chain (context vars, log level, timestamps, stack info)
feeds either a coloured ConsoleRenderer for local runs or a JSONRenderer for
the deployed worker.  ``APP_ENV=production`` (or ``json_output=True``) picks
JSON; anything else gets the console renderer.

Standard-library ``logging`` is routed through the same formatter so that
httpx, openai and chromadb log lines look like ours.
"""

import logging
import os
import sys

import structlog


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    app_env: str | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON rendering regardless of environment.
        app_env: Deployment environment.  Falls back to ``APP_ENV``.

    Returns:
        A configured structlog BoundLogger.
    """
    env = app_env if app_env is not None else os.environ.get("APP_ENV", "development")
    use_json = json_output or env == "production"

    shared = _shared_processors()
    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *shared,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # httpx logs every request at INFO; one line per Last.fm call is noise.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound with ``logger_name``.

    Configures logging with defaults if nothing has done so yet.
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
