import pytest

from flakegen.host import APIVER_1, CommandFlag, ModuleContext, ModuleError, ReplyType
from flakegen.module import (
    COMMAND_NAME,
    GENERATOR_KEY,
    get_id_command,
    main,
    on_load,
)
from flakegen.snowflake import EPOCH, MAX_REGION_ID, MAX_WORKER_ID, SnowflakeGenerator, decompose


def make_ctx():
    return ModuleContext("snowflake", 1, APIVER_1)


def test_on_load_registers_readonly_command():
    ctx = make_ctx()
    on_load(ctx, ["3", "7"])
    command = ctx.commands[COMMAND_NAME]
    assert command.flags == frozenset({CommandFlag.READONLY})
    assert (command.first_key, command.last_key, command.key_step) == (1, 1, 1)


def test_on_load_logs_chosen_ids():
    ctx = make_ctx()
    on_load(ctx, [b"3", b"7"])
    assert ("info", "using region_id: 3  worker_id: 7") in ctx.log_records


def test_getid_encodes_region_and_worker():
    ctx = make_ctx()
    on_load(ctx, ["3", "7"])
    reply = ctx.call(COMMAND_NAME)
    assert reply.type == ReplyType.INTEGER
    parts = decompose(reply.value)
    assert (parts.region_id, parts.worker_id) == (3, 7)


def test_getid_values_strictly_increase():
    ctx = make_ctx()
    on_load(ctx, ["1", "2"])
    ids = [ctx.call(COMMAND_NAME).value for _ in range(50)]
    assert ids == sorted(set(ids))


def test_getid_ignores_arguments():
    ctx = make_ctx()
    on_load(ctx, ["1", "2"])
    reply = ctx.call(COMMAND_NAME, "extra", "args")
    assert decompose(reply.value).worker_id == 2


@pytest.mark.parametrize("args", [[], ["1"], ["1", "2", "3"]])
def test_missing_parameters(args):
    ctx = make_ctx()
    with pytest.raises(ModuleError):
        on_load(ctx, args)
    assert ("error", "Missing region_id and worker_id parameters") in ctx.log_records
    assert COMMAND_NAME not in ctx.commands


def test_invalid_region_id():
    ctx = make_ctx()
    with pytest.raises(ModuleError):
        on_load(ctx, ["x", "1"])
    assert ("error", "Invalid region_id value") in ctx.log_records


def test_invalid_worker_id():
    ctx = make_ctx()
    with pytest.raises(ModuleError):
        on_load(ctx, ["1", "1.5"])
    assert ("error", "Invalid worker_id value") in ctx.log_records


@pytest.mark.parametrize(
    "args",
    [[str(MAX_REGION_ID + 1), "0"], ["0", str(MAX_WORKER_ID + 1)], ["-1", "0"]],
)
def test_out_of_range_ids_fail_initialization(args):
    ctx = make_ctx()
    with pytest.raises(ModuleError):
        on_load(ctx, args)
    assert ("error", "Failed to initialize snowflake") in ctx.log_records
    assert GENERATOR_KEY not in ctx.state


def test_get_id_without_generator_replies_error():
    ctx = make_ctx()
    get_id_command(ctx, [])
    (reply,) = ctx.take_replies()
    assert reply.type == ReplyType.ERROR


def test_get_id_uses_generator_clock():
    ctx = make_ctx()
    ctx.state[GENERATOR_KEY] = SnowflakeGenerator(
        4, 9, clock=lambda: (EPOCH + 1000) * 1_000_000
    )
    get_id_command(ctx, [])
    get_id_command(ctx, [])
    first, second = ctx.take_replies()
    assert decompose(first.value).millis == 1000
    assert decompose(second.value).sequence == decompose(first.value).sequence + 1


def test_main_prints_requested_ids(capsys):
    assert main(["5", "6", "--count", "3"]) == 0
    lines = capsys.readouterr().out.split()
    assert len(lines) == 3
    ids = [int(line) for line in lines]
    assert ids == sorted(set(ids))
    assert all(decompose(i).region_id == 5 for i in ids)


def test_main_reports_bad_arguments(capsys):
    assert main(["99", "1"]) == 1
    assert "Failed to initialize snowflake" in capsys.readouterr().err