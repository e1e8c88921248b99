"""
Here we put util functions related to logging, config and input handling for pagerun commands.
"""

from pathlib import Path
from typing import Optional

import click

from pagerun.common.logger import setup_logging
from pagerun.config import PagerunConfig


def get_log_dir():
    """
    Determines a suitable path for the log file.
    Logs are stored in the user's home directory under '.pagerun/logs/'.
    """
    home_dir = Path.home()
    log_dir = home_dir / '.pagerun' / 'logs'  # Log saved to `~/.pagerun/logs/`
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def setup_command_logger(log_filename, verbose=False, log_config=None):
    """
    Sets up logging for a command: console plus a file under the log dir.
    """
    log_file_path = get_log_dir() / log_filename
    return setup_logging(
        config_file_path=log_config,
        log_file_path=log_file_path,
        verbose=verbose,
    )


def load_command_config(config_path: Optional[str], headed: bool, caps: Optional[str]) -> PagerunConfig:
    """
    Build the runtime config: file, then environment, then command-line flags.
    """
    config = PagerunConfig.load(config_path)
    overrides = {}
    if headed:
        overrides["headless"] = False
    if caps:
        overrides["capabilities"] = caps
    return config.updated(overrides) if overrides else config


def read_code_input(code: Optional[str], file: Optional[str]) -> str:
    """
    Resolve the code to run from --code, --file or stdin, in that order.
    """
    if code is not None and file is not None:
        raise click.UsageError("Use either --code or --file, not both.")
    if code is not None:
        return code
    if file is not None:
        return Path(file).read_text(encoding="utf-8")

    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        raise click.UsageError("No code given. Pass --code, --file, or pipe code on stdin.")
    return stdin.read()
