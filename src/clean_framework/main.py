"""Application bootstrap.

Loads settings, configures logging, builds the container and runs the
greeting demo against the simulated external interface.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from .core.config import load_settings
from .features.greeting import (
    DemoExternalInterface,
    GreetingUseCase,
    GreetingViewOutput,
    build_container,
)
from .observability.logger import setup_logging

logger = logging.getLogger(__name__)


async def run(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    name: str = "world",
) -> GreetingViewOutput:
    """Main entry point. Load config, wire providers, run the demo."""

    # 1. Load settings
    settings = load_settings(config_path=config_path, overrides=overrides)

    # 2. Set up logging
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )

    # 3. Wire providers; resolving the interface attaches both gateways
    container = build_container(settings)
    interface = container.resolve(DemoExternalInterface)
    use_case = container.resolve(GreetingUseCase)

    remove_listener = use_case.add_listener(
        lambda entity: logger.info(
            "Entity changed: greeting=%r ticks=%s", entity.greeting, entity.ticks
        )
    )

    try:
        # 4. Single-shot request
        await use_case.greet(name)

        # 5. Streaming request: resolves on the first tick, the rest arrive
        # while we wait out the subscription
        demo = settings.demo
        await use_case.watch_ticks(demo.ticks, demo.tick_interval_seconds)
        while interface.active_tasks:
            await asyncio.sleep(demo.tick_interval_seconds)

        output = use_case.get_output(GreetingViewOutput)
        logger.info(
            "Demo finished: greeting=%r ticks=%d", output.greeting, output.tick_count
        )
        return output
    finally:
        remove_listener()
        await container.dispose()

