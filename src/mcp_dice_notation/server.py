from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .config import SERVER_NAME, load_settings
from .dice import roll_from_text, roll_range
from .errors import DiceError
from .graph import render_graph
from .parser import parse_request


logger = logging.getLogger(__name__)

mcp = FastMCP(SERVER_NAME)


@mcp.tool()
def roll_dice(text: str, mode: str = "random"):
    """Roll a dice expression such as '4d6kh3 + 2', '2d20adv' or '(1d4+1)*3'.

    Input: text (string), mode ('random', 'min', 'mid' or 'max')
    Output: structured JSON with every die rolled, whether it was kept, and the total

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll_from_text(text, mode)
    except DiceError as e:
        # Fail-fast: surface stable error codes in the message.
        logger.info("rejected %r: %s", text, e)
        raise ValueError(str(e)) from None


@mcp.tool()
def dice_range(text: str):
    """Worst ('min'), average ('mid') and best ('max') totals of a dice expression."""

    try:
        return roll_range(text)
    except DiceError as e:
        logger.info("rejected %r: %s", text, e)
        raise ValueError(str(e)) from None


@mcp.tool()
def dice_graph(text: str, dialect: str = "dot") -> str:
    """Syntax tree of a dice expression as a Graphviz 'dot' or 'mermaid' graph."""

    try:
        settings = load_settings()
        parsed = parse_request(text, max_length=settings.max_input_length, max_depth=settings.max_depth)
        return render_graph(parsed.root, dialect)
    except DiceError as e:
        logger.info("rejected %r: %s", text, e)
        raise ValueError(str(e)) from None


def run() -> None:
    settings = load_settings()
    # stdout carries the MCP stdio transport; logs go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=settings.log_level,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("starting %s", SERVER_NAME)
    mcp.run()


if __name__ == "__main__":
    run()
