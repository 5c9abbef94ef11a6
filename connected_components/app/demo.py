import argparse
import asyncio
from pathlib import Path
from typing import Dict, Optional, Sequence

from connected_components.app.components import INC, TabComponent
from connected_components.core import ConnectedCoordinator, PubSub, h, live_component
from connected_components.core.cli import InteractiveShell
from connected_components.core.config_manager import get_config_manager
from connected_components.core.logging_config import configure_logging
from connected_components.core.logging_utils import get_module_logger
from connected_components.core.paths import CONFIG_PATH, DEMO_LOG_FILE, ensure_directories
from connected_components.core.settings import CoordinatorSettings


logger = get_module_logger("Demo")

TABS = ("a", "b")


class DemoCoordinator(ConnectedCoordinator):
    """Shows one tab at a time; each tab counts messages on its own topic."""

    def __init__(self, pubsub: PubSub, **kwargs):
        super().__init__(**kwargs)
        self.pubsub = pubsub

    def mount(self) -> None:
        super().mount()
        self.assign(tab="a")

    def render(self):
        tab = self.assigns["tab"]
        return h(
            "main",
            {},
            h("nav", {}, *[f"[{name}]" if name == tab else name for name in TABS]),
            live_component(TabComponent, f"tab_{tab}", count=0, pubsub=self.pubsub),
        )

    def handle_event(self, event, params):
        if event == "select_tab":
            tab = params.get("tab")
            if tab not in TABS:
                logger.warning("Unknown tab %r", tab)
                return
            self.assign(tab=tab)
        elif event == "inc_pubsub":
            self.pubsub.broadcast(params["topic"], INC)
        else:
            super().handle_event(event, params)


def parse_args(
    argv: Optional[Sequence[str]] = None,
    config: Optional[Dict[str, str]] = None,
) -> argparse.Namespace:
    """Parse command-line arguments with config file defaults.

    ``config`` is the already-loaded config file; it is read from
    CONFIG_PATH when omitted.
    """
    config_manager = get_config_manager()
    if config is None:
        config = config_manager.read_config(CONFIG_PATH)

    default_log_level = config_manager.get_str(config, 'log_level', default='info')
    default_console_output = config_manager.get_bool(config, 'console_output', default=False)
    default_log_file = config_manager.get_str(config, 'log_file', default=str(DEMO_LOG_FILE))

    parser = argparse.ArgumentParser(
        description="Connected components demo - tabs that follow PubSub topics"
    )

    parser.add_argument(
        "--mode",
        choices=['interactive', 'script'],
        default='interactive',
        help="interactive (default, command shell) or script (fixed sequence, then exit)"
    )

    parser.add_argument(
        "--log-level",
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        default=default_log_level,
        help="Logging level (default: info)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=Path(default_log_file) if default_log_file else None,
        help="Rotating log file (default: logs/demo.log)"
    )

    parser.add_argument(
        "--console",
        dest="console_output",
        action="store_true",
        default=default_console_output,
        help="Also log to console"
    )

    parser.add_argument(
        "--no-console",
        dest="console_output",
        action="store_false",
        help="Log to file only"
    )

    return parser.parse_args(list(argv) if argv is not None else None)


async def run_script(coordinator: DemoCoordinator, shell: InteractiveShell) -> None:
    """Drive the demo through a fixed sequence of shell commands."""
    for line in (
        "status",
        "inc a",
        "inc a",
        "click tab_a inc_send",
        "inc nested",
        "click tab_a_nested inc_parent",
        "status",
        "tab b",
        "inc a",
        "inc b",
        "status",
    ):
        print(f"\ndemo> {line}")
        await shell.execute(line)
        await coordinator.wait_idle()


async def main(argv: Optional[Sequence[str]] = None) -> int:
    config = await get_config_manager().read_config_async(CONFIG_PATH)
    args = parse_args(argv, config)

    ensure_directories()
    configure_logging(
        args.log_level,
        console=args.console_output,
        log_file=args.log_file,
    )

    settings = CoordinatorSettings.from_config(config)
    pubsub = PubSub("demo")
    coordinator = DemoCoordinator(pubsub, coordinator_id="demo", settings=settings)
    shell = InteractiveShell(coordinator, pubsub)

    coordinator_task = coordinator.start()

    try:
        await coordinator.wait_idle()
        if args.mode == "script":
            await run_script(coordinator, shell)
        else:
            await shell.run()
    finally:
        await coordinator.stop()

    if not coordinator_task.cancelled() and coordinator_task.exception() is not None:
        logger.error("Coordinator exited with %r", coordinator_task.exception())
        return 1
    return 0


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Convenience wrapper that runs the async demo entry point."""
    return asyncio.run(main(argv))
