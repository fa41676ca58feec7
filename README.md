# flakegen

flakegen generates unique 64-bit integer IDs that sort roughly by time. Separate
processes can generate IDs without coordinating with each other. Each ID is
built from four fields:

| Field     | Bits | Meaning                                            |
|-----------|------|----------------------------------------------------|
| time      | 41   | milliseconds since 2025-01-01T00:00:00Z            |
| region    | 4    | region id, `0`–`15`                                |
| worker    | 10   | worker id, `0`–`1023`                              |
| sequence  | 8    | counter within one millisecond, `0`–`255`          |

IDs never collide as long as every running generator has its own
region/worker pair. The generator waits in two cases: when more than 256 IDs
are requested in the same millisecond, and when the clock moves backwards.
In both cases it waits until the clock passes the last millisecond it used.

flakegen depends on the standard library only.

## Installation

```
pip install flakegen
```

## Using the generator

```python
from flakegen.snowflake import SnowflakeGenerator, SnowflakeError, decompose

gen = SnowflakeGenerator(region_id=1, worker_id=7)

first = gen.next_id()
second = next(gen)        # the generator is also an iterator
assert second > first

parts = decompose(first)  # SnowflakeParts(millis, region_id, worker_id, sequence)
print(parts.region_id, parts.worker_id, parts.sequence)
print(parts.unix_millis)  # the timestamp in milliseconds since the Unix epoch
```

`next_id()` is protected by a lock, so several threads can share one generator.

### Clock

The optional `clock` argument takes a callable that returns nanoseconds since
the Unix epoch. The default is `time.time_ns`. A clock that you control is
useful in tests:

```python
gen = SnowflakeGenerator(0, 0, clock=lambda: 1735689600123 * 1_000_000)
```

`current_millis(clock)` returns the milliseconds elapsed since the 2025 epoch,
read from such a clock (or from `time.time_ns` when `clock` is `None`).

### Errors

`SnowflakeError`, a subclass of `ValueError`, is raised in two cases:

- a region id or a worker id outside its range is passed to `SnowflakeGenerator`;
- a negative number is passed to `decompose`.

```python
try:
    SnowflakeGenerator(region_id=16, worker_id=0)
except SnowflakeError as exc:
    print(exc)            # Region ID must be in the range: 0-15
```

### Statistics

Each generator keeps counters in its `stats` attribute, an
`flakegen.stats.AppStats` record:

- `ids`: IDs handed out
- `waits`: times it had to wait for the clock
- `seq_max`: highest sequence count reached
- `seq_cap`: the sequence limit
- `region_id`, `worker_id`: the generator's identity
- `started_at`: creation time
- `version`: an optional version label

`AppStats.reset(region_id, worker_id, seq_cap)` clears the counters.
`AppStats.as_dict()` returns them as a plain dictionary.

## Command host

`flakegen.host` provides `ModuleContext`, a small in-process command host with
Redis-style replies.

- **Creating a host.** `ModuleContext(name, version, api_version)` accepts
  only API version `1`.
- **Registering commands.** `create_command(name, handler, flags, first_key, last_key, key_step)`
  registers a handler under a case-insensitive name. `flags` is a
  space-separated string of `CommandFlag` values, such as `"readonly"`.
- **Running commands.** `call(name, *args)` runs a command and returns its
  single reply as a `(type, value)` pair, where `type` is a `ReplyType`.
- **Replying from a handler.** Handlers reply with `reply_with_long_long`,
  `reply_with_double`, `reply_with_string`, `reply_with_simple_string`,
  `reply_with_error`, `reply_with_null`, `reply_with_array` or `wrong_arity`.
- **Logging.** `log(level, message)` records messages in `log_records` and
  passes them to the `logging` logger `flakegen.module.<name>`.
- **Other helpers.** `string_to_long_long` and `string_to_double` parse
  arguments strictly, and `encode_reply` turns a reply into wire-protocol
  bytes.
- **Failures.** The host raises `ModuleError` when something fails.

`flakegen.module.on_load(ctx, args)` takes the region id and the worker id as
two string arguments. It creates a generator and registers the
`snowflake.getid` command, which replies with the next ID:

```python
from flakegen.host import ModuleContext
from flakegen.module import on_load

ctx = ModuleContext("snowflake", 1, 1)
on_load(ctx, ["1", "7"])
reply = ctx.call("snowflake.getid")
print(reply.value)
```

`on_load` raises `ModuleError` in three cases:

- it does not get exactly two arguments;
- an argument is not an integer;
- an id is out of range.

## Command line

```
flakegen 1 7
flakegen 1 7 --count 5
```

The arguments are the region id and the worker id. The command loads the
`snowflake.getid` command with them and prints one ID per line. `-n`/`--count`
sets how many IDs to print and defaults to 1. The command exits with status 1
if it fails to load.

## What it does not do

The command host runs inside your Python process only. flakegen includes no
network server, does not load into a Redis server, and speaks no network
protocol. `encode_reply` only produces the reply bytes. IDs and counters are
not stored anywhere, and a new generator starts from scratch.

## Running the tests

```
pip install -e ".[test]"
pytest
```