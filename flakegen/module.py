"""The snowflake command module and a command line that drives it."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from flakegen.host import (
    APIVER_1,
    ModuleContext,
    ModuleError,
    string_to_long_long,
)
from flakegen.snowflake import SnowflakeError, SnowflakeGenerator

MODULE_NAME = "snowflake"
MODULE_VERSION = 1
COMMAND_NAME = "snowflake.getid"
GENERATOR_KEY = "snowflake"


def get_id_command(ctx: ModuleContext, args: list) -> None:
    """Reply with the next identifier from the module's generator."""
    generator = ctx.state.get(GENERATOR_KEY)
    if generator is None:
        ctx.reply_with_error("ERR snowflake generator is not initialized")
        return
    ctx.reply_with_long_long(generator.next_id())


def on_load(ctx: ModuleContext, args: Sequence[str | bytes]) -> None:
    """Set up the generator from region and worker arguments and register the command."""
    if len(args) != 2:
        ctx.log("error", "Missing region_id and worker_id parameters")
        raise ModuleError("Missing region_id and worker_id parameters")

    try:
        region_id = string_to_long_long(args[0])
    except ModuleError as exc:
        ctx.log("error", "Invalid region_id value")
        raise ModuleError("Invalid region_id value") from exc

    try:
        worker_id = string_to_long_long(args[1])
    except ModuleError as exc:
        ctx.log("error", "Invalid worker_id value")
        raise ModuleError("Invalid worker_id value") from exc

    ctx.log("info", f"using region_id: {region_id}  worker_id: {worker_id}")

    try:
        generator = SnowflakeGenerator(region_id, worker_id)
    except SnowflakeError as exc:
        ctx.log("error", "Failed to initialize snowflake")
        raise ModuleError("Failed to initialize snowflake") from exc

    ctx.state[GENERATOR_KEY] = generator
    ctx.create_command(COMMAND_NAME, get_id_command, "readonly", 1, 1, 1)


def main(argv: Sequence[str] | None = None) -> int:
    """Load the module with the given region and worker and print identifiers."""
    parser = argparse.ArgumentParser(
        prog="flakegen", description="Generate time-ordered 64-bit identifiers."
    )
    parser.add_argument("region_id", help="region identifier")
    parser.add_argument("worker_id", help="worker identifier")
    parser.add_argument(
        "-n", "--count", type=int, default=1, help="how many identifiers to print"
    )
    options = parser.parse_args(argv)
    if options.count < 0:
        parser.error("--count must not be negative")

    ctx = ModuleContext(MODULE_NAME, MODULE_VERSION, APIVER_1)
    try:
        on_load(ctx, [options.region_id, options.worker_id])
    except ModuleError as exc:
        print(f"flakegen: {exc}", file=sys.stderr)
        return 1

    for _ in range(options.count):
        print(ctx.call(COMMAND_NAME).value)
    return 0


if __name__ == "__main__":
    sys.exit(main())