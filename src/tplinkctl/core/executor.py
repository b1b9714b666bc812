"""Run one operation against many devices concurrently."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from tplinkctl.config import QueryConfig
from tplinkctl.devices import RawDevice
from tplinkctl.errors import CapabilityError, DeviceError, DeviceResponseError
from tplinkctl.models import ActionOutcome, Endpoint, Failure, StatusOutcome, SysInfo

from .resolver import resolve

logger = logging.getLogger(__name__)

T = TypeVar("T")
Operation = Callable[[RawDevice, SysInfo], Awaitable[T]]

REBOOT_LABEL = "Rebooted?"
SWITCH_ON_LABEL = "Switched on?"
SWITCH_OFF_LABEL = "Switched off?"


async def query_status(device: RawDevice, info: SysInfo) -> StatusOutcome:
    """Read on/off state and location from the canonical snapshot."""
    is_on = device.is_on_from(info)
    location = device.location_from(info)
    return StatusOutcome(
        endpoint=device.endpoint,
        kind=device.kind,
        sysinfo=info,
        is_on=is_on,
        location=location,
    )


async def _act(
    device: RawDevice, info: SysInfo, action: str, command: Awaitable[None]
) -> ActionOutcome:
    result: bool | str
    try:
        await command
        result = True
    except (CapabilityError, DeviceResponseError) as exc:
        # refusals stay in the row; transport failures drop the endpoint
        logger.warning("%s failed on %s: %s", action, device.endpoint, exc)
        result = f"Error: {exc}"
    return ActionOutcome(
        endpoint=device.endpoint,
        kind=device.kind,
        sysinfo=info,
        action=action,
        result=result,
    )


def reboot_with_delay(delay: int) -> Operation[ActionOutcome]:
    async def _reboot(device: RawDevice, info: SysInfo) -> ActionOutcome:
        return await _act(device, info, REBOOT_LABEL, device.reboot(delay))

    return _reboot


def switch(on: bool) -> Operation[ActionOutcome]:
    label = SWITCH_ON_LABEL if on else SWITCH_OFF_LABEL

    async def _switch(device: RawDevice, info: SysInfo) -> ActionOutcome:
        return await _act(device, info, label, device.switch(on))

    return _switch


def partition(results: Sequence[T | Failure]) -> tuple[list[T], list[Failure]]:
    outcomes: list[T] = []
    failures: list[Failure] = []
    for result in results:
        if isinstance(result, Failure):
            failures.append(result)
        else:
            outcomes.append(result)
    return outcomes, failures


def report_failure(failure: Failure) -> None:
    logger.error("While querying %s: %s", failure.endpoint, failure.error)


async def run_one(
    endpoint: Endpoint, operation: Operation[T], config: QueryConfig
) -> T | Failure:
    """Resolve one endpoint and apply ``operation``.

    Device errors are returned as a ``Failure`` rather than raised.
    """
    try:
        device, info = await resolve(endpoint, config)
        return await operation(device, info)
    except DeviceError as exc:
        return Failure(endpoint, exc)


async def run_batch(
    endpoints: Sequence[Endpoint],
    operation: Operation[T],
    config: QueryConfig | None = None,
) -> list[T]:
    """Apply ``operation`` to every endpoint with a bounded pool of workers.

    Endpoints that fail are logged and left out of the returned list. Each
    endpoint gets exactly one attempt.
    """
    if config is None:
        config = QueryConfig()
    if not endpoints:
        return []

    worker_count = min(config.parallel_queries, len(endpoints))
    logger.debug("Querying %d devices (%d workers)", len(endpoints), worker_count)

    # each index is written by exactly one worker
    slots: list[T | Failure | None] = [None] * len(endpoints)
    queue: asyncio.Queue[int | None] = asyncio.Queue(maxsize=worker_count * 4)

    async def _producer() -> None:
        for index in range(len(endpoints)):
            await queue.put(index)
        for _ in range(worker_count):
            await queue.put(None)

    async def _worker() -> None:
        while True:
            index = await queue.get()
            try:
                if index is None:
                    return
                slots[index] = await run_one(endpoints[index], operation, config)
            finally:
                queue.task_done()

    tasks = [asyncio.create_task(_producer())]
    tasks += [asyncio.create_task(_worker()) for _ in range(worker_count)]
    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    results = [slot for slot in slots if slot is not None]
    outcomes, failures = partition(results)
    for failure in failures:
        report_failure(failure)
    logger.debug(
        "Batch complete: %d succeeded, %d failed", len(outcomes), len(failures)
    )
    return outcomes
