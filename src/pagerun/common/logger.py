# logger.py
import copy
import logging
import logging.config

from pagerun.util.file_utils import ensure_dir, from_json_or_yaml


DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] %(levelname)s:%(name)s:%(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "WARNING",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def setup_logging(
    config_file_path=None,
    log_file_path=None,
    verbose=False,
):
    """
    Loads logging config from 'config_file_path' (YAML or JSON) and sets up logging.
    Falls back to DEFAULT_LOGGING_CONFIG when no file is given.
    Optionally add or override the file handler's filename, and set root logger to DEBUG if 'verbose'.
    """
    if config_file_path:
        config = from_json_or_yaml(config_file_path)
    else:
        config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)

    # If user passed a custom file path for logs, point the "file_handler" at it
    if log_file_path:
        ensure_dir(log_file_path)
        handlers = config.setdefault("handlers", {})
        if "file_handler" in handlers:
            handlers["file_handler"]["filename"] = str(log_file_path)
        else:
            handlers["file_handler"] = {
                "class": "logging.FileHandler",
                "level": "DEBUG",
                "formatter": next(iter(config.get("formatters", {})), None) or "standard",
                "filename": str(log_file_path),
                "encoding": "utf-8",
            }
            config.setdefault("formatters", {}).setdefault(
                "standard", DEFAULT_LOGGING_CONFIG["formatters"]["standard"]
            )
            root_handlers = config.setdefault("root", {}).setdefault("handlers", [])
            if "file_handler" not in root_handlers:
                root_handlers.append("file_handler")

    logging.config.dictConfig(config)

    # If --verbose was passed, raise the global level to DEBUG
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    return logging.getLogger(__name__)
