# runnerdeck

A keyboard-driven terminal dashboard for the self-hosted GitHub Actions
runners of one organization. It lists every runner together with its runner
group and custom labels, and lets you:

- add a custom label to a runner,
- remove a custom label from a runner,
- move a runner to another runner group,
- create a new runner group,
- grant a repository access to a runner group,
- list the repositories that have access to a runner group.

## Installation

```
pip install runnerdeck
```

## Configuration

runnerdeck reads a `.env` file, by default from the directory it is started
in. It needs two entries, the organization name and an access token allowed
to manage the organization's runners:

```
organization = my-org
token = token
```

Lines are `key = value`; surrounding whitespace is ignored and lines without
an `=` are skipped. Both keys are required; if either is missing the program
stops with "Could not read config file".

## Running

```
runnerdeck
```

Options:

- `--env-file PATH` – read the settings from `PATH` instead of `.env`.
- `--log-file PATH` – write debug logs (every request, cache hits) to `PATH`.

Before the screen opens, the runner groups of the organization and the
runners of every group are fetched. Responses for the group list and for
each group's runners are cached for five minutes; after adding or removing a
label, changing a runner's group or creating a group, the runner list is
fetched again without the cache and the *Runners* tab is shown.

## Keys

| Key               | Action                                                        |
|-------------------|---------------------------------------------------------------|
| `Tab`             | switch between the *Runners* and *Runner Groups* tabs         |
| `↑` / `↓`         | move the selection                                            |
| `Home` / `End`    | jump to the first / last entry of the runner or group list    |
| any character     | filter the runner or group list, or type into an input box    |
| `Backspace`       | remove the last filter or input character                     |
| `→` / `Enter`     | open the operations for the selected entry, or confirm        |
| `←`               | go back one step, or clear the selection in the main list     |
| `Esc`             | quit when no box is open; closes the input boxes of the *Runner Groups* tab |

The list filter keeps the entries whose displayed text contains what you
typed. The hint in the footer mentions `g`/`G`; these keys are not bound and
act as filter characters like any other.

In the *Runners* tab, choose an operation for the selected runner:

- **Add label** – an input box opens; type the label and press `Enter`.
- **Remove label** – pick one of the runner's custom labels and press `Enter`.
- **Change group** – an input box opens; type the name of the target runner
  group and press `Enter`.

In the *Runner Groups* tab, choose an operation for the selected group:

- **Create group** – type a name and press `Enter`; the group is created with
  *selected* visibility, no repositories and no runners.
- **Get repos accesses** – show the repositories that may use the group.
- **Add repo** – type the name of a repository of the organization and press
  `Enter` to grant it access to the group.

A "Loading" box is shown while a change is being carried out.

## Using the library

The pieces behind the dashboard can be used on their own:

- `runnerdeck.config` – `Config`, `parse_dot_env(text)`, `read_dot_env(path)`.
- `runnerdeck.api` – the asynchronous `Client` (built on httpx) with its
  `runners()`, `runner_groups()` and `repos()` endpoints and the response
  dataclasses.
- `runnerdeck.models` – `Runner`, `RunnerGroup`, `RunnerStatus` and the
  operation enums shown in the interface.
- `runnerdeck.backend` – `build_client(config)`, the request and reply message
  classes and the `Worker` that carries requests out.
- `runnerdeck.cache` – the expiring `Cache` used by the client.
- `runnerdeck.widgets`, `runnerdeck.runners_tab`, `runnerdeck.groups_tab`,
  `runnerdeck.app` – the text-based widgets, the two tabs and the application.

```python
import asyncio

from runnerdeck.backend import build_client
from runnerdeck.config import parse_dot_env
from runnerdeck.models import Runner


async def list_runners() -> None:
    config = parse_dot_env("organization = my-org\ntoken = token\n")
    async with build_client(config) as client:
        groups = await client.runner_groups().get_all(skip_cache=False)
        for group in groups.runner_groups:
            response = await client.runner_groups().get_runners(group.id, skip_cache=False)
            for api_runner in response.runners:
                runner = Runner.from_api(api_runner)
                runner.group = group.name
                print(runner)


asyncio.run(list_runners())
```

## Limits

- Failed API requests are not reported on screen: the background worker stops
  and, with `--log-file`, the error is written to the log.
- Runners cannot be registered or deleted, and runner groups cannot be
  renamed or removed.

## Development

```
pip install -e ".[test]"
pytest
```