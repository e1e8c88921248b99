# pagerun/command/pagerun_exec.py

import asyncio
import json
import logging
import sys

import click

from pagerun.browser import BrowserSession
from pagerun.command.command_utils import (
    load_command_config,
    read_code_input,
    setup_command_logger,
)
from pagerun.tool.capability import parse_capabilities
from pagerun.tool.core.playwright_code import TOOL_NAME
from pagerun.tool.registry import ToolRegistry


async def _run_code(config, code, url, as_json):
    registry = ToolRegistry(include_snapshots=config.include_snapshots)
    registry.discover()
    async with BrowserSession(config) as session:
        if url:
            await session.tab.page.goto(url)
        result = await registry.execute(TOOL_NAME, session.tab, {"code": code})
    if as_json:
        return json.dumps(result.to_dict(), indent=2), result.is_error
    return result.text, result.is_error


@click.command(name="pagerun-exec")
@click.option(
    '--code', '-e',
    default=None,
    help='Playwright code to run: the body of an async function taking `page`.',
)
@click.option(
    '--file', '-f',
    default=None,
    help='Read the code from a file instead of --code.',
    type=click.Path(exists=True, dir_okay=False)
)
@click.option(
    '--url', '-u',
    default=None,
    help='Navigate to this URL before running the code.',
)
@click.option(
    '--config', '-c',
    default=None,
    help='Path to the configuration file (YAML or JSON).',
    type=click.Path(exists=True, dir_okay=False)
)
@click.option(
    '--caps',
    default=None,
    help='Comma-separated extra capabilities to expose (e.g. vision,pdf).',
)
@click.option(
    '--headed',
    is_flag=True,
    help='Show the browser window.'
)
@click.option(
    '--json', 'as_json',
    is_flag=True,
    help='Print the MCP-style response payload as JSON.'
)
@click.option(
    '--list-tools',
    is_flag=True,
    help='Print the exposed tool schemas and exit.'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging.'
)
def run(code, file, url, config, caps, headed, as_json, list_tools, verbose):
    """
    Runs Playwright code against a fresh browser page and prints the tool response.
    """
    try:
        runtime_config = load_command_config(config, headed, caps)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config")

    logger = setup_command_logger(log_filename="pagerun-exec.log", verbose=verbose)
    if not verbose:
        try:
            logging.getLogger("pagerun").setLevel(runtime_config.log_level)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="PAGERUN_LOG_LEVEL")
    logger.debug(f"Runtime config: {runtime_config.as_dict()}")

    try:
        capabilities = parse_capabilities(runtime_config.capabilities)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--caps")

    if list_tools:
        registry = ToolRegistry()
        registry.discover()
        click.echo(json.dumps(registry.list_mcp_tools(capabilities), indent=2))
        return

    source = read_code_input(code, file)

    try:
        output, is_error = asyncio.run(_run_code(runtime_config, source, url, as_json))
    except Exception as e:
        logger.error(f"Browser session failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    click.echo(output)
    if is_error:
        sys.exit(1)


if __name__ == "__main__":
    run()
