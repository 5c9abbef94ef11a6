import asyncio
from typing import List, Optional

from connected_components.core.connected import ConnectedCoordinator, get_registry, send_component
from connected_components.core.identity import IdentityToken, parse_token
from connected_components.core.logging_utils import get_module_logger
from connected_components.core.pubsub import PubSub


class InteractiveShell:
    """
    Interactive command-line shell for a connected coordinator.

    Every command is turned into what the UI layer would produce (an event
    pushed to the coordinator) or what another process would do (a PubSub
    broadcast, a send_component), so the shell never touches coordinator
    state directly.
    """

    def __init__(self, coordinator: ConnectedCoordinator, pubsub: PubSub):
        self.logger = get_module_logger("InteractiveShell")
        self.coordinator = coordinator
        self.pubsub = pubsub
        self.running = True

    async def run(self) -> None:
        """Run the interactive shell."""
        self.logger.info("Starting interactive shell")
        print("\n" + "=" * 60)
        print("Connected components - Interactive CLI")
        print("=" * 60)
        print("Type 'help' for available commands, 'quit' to exit")
        print("=" * 60 + "\n")

        await self._cmd_status()

        loop = asyncio.get_running_loop()
        while self.running and self.coordinator.is_alive:
            try:
                line = await loop.run_in_executor(None, lambda: input("\ndemo> ").strip())
                if not line:
                    continue
                await self.execute(line)
                await self.coordinator.wait_idle()

            except EOFError:
                print("\nEOF received, shutting down...")
                break
            except KeyboardInterrupt:
                print("\n\nInterrupt received. Type 'quit' to exit.")
                continue
            except Exception as e:
                self.logger.error("Command error: %s", e, exc_info=True)
                print(f"Error: {e}")

        self.logger.info("Interactive shell exiting")

    async def execute(self, line: str) -> None:
        """Parse and execute a command line."""
        parts = line.split()
        if not parts:
            return

        cmd = parts[0].lower()
        args = parts[1:]

        commands = {
            'help': self._cmd_help,
            'status': self._cmd_status,
            'tab': self._cmd_tab,
            'inc': self._cmd_inc,
            'click': self._cmd_click,
            'send': self._cmd_send,
            'quit': self._cmd_quit,
            'exit': self._cmd_quit,
        }

        handler = commands.get(cmd)
        if handler:
            await handler(args)
        else:
            print(f"Unknown command: {cmd}")
            print("Type 'help' for available commands")

    async def _cmd_help(self, args=None) -> None:
        """Show help."""
        print("\nAvailable Commands:")
        print("-" * 60)
        print("  help                      - Show this help message")
        print("  status                    - Show mounted components and actors")
        print("  tab <a|b>                 - Switch the visible tab")
        print("  inc <a|b|nested>          - Broadcast 'inc' on a PubSub topic")
        print("  click <component> <event> - Push a UI event to a component")
        print("  send <component> <msg>    - send_component to a component actor")
        print("  quit / exit               - Shutdown and exit")
        print("-" * 60)

    async def _cmd_status(self, args=None) -> None:
        """Show mounted component instances."""
        registry = get_registry(self.coordinator)
        actors = registry.actors()

        print("\nComponents:")
        print("-" * 60)
        instances = self.coordinator.instances()
        if not instances:
            print("  (none)")
        for instance in instances:
            handle = actors.get(instance.token)
            actor = handle.state.value if handle is not None else "no actor"
            attached = "attached" if instance.token in registry else "detached"
            count = instance.socket.assigns.get("count")
            print(f"  {str(instance.token):<10} {str(instance.descriptor):<28} "
                  f"count={count} {attached}, {actor}")
        print("-" * 60)

    async def _cmd_tab(self, args: List[str]) -> None:
        if not args:
            print("Usage: tab <a|b>")
            return
        self.coordinator.push_event("select_tab", {"tab": args[0]})

    async def _cmd_inc(self, args: List[str]) -> None:
        if not args:
            print("Usage: inc <a|b|nested>")
            return
        name = args[0]
        topic = "nested_updates" if name == "nested" else f"tab_{name}_updates"
        self.coordinator.push_event("inc_pubsub", {"topic": topic})
        print(f"Broadcast 'inc' on {topic}")

    async def _cmd_click(self, args: List[str]) -> None:
        if len(args) < 2:
            print("Usage: click <component> <event>")
            return
        token = self._resolve(args[0])
        if token is None:
            return
        self.coordinator.push_event(args[1], {}, target=token)

    async def _cmd_send(self, args: List[str]) -> None:
        if len(args) < 2:
            print("Usage: send <component> <message>")
            return
        token = self._resolve(args[0])
        if token is None:
            return
        send_component(token, args[1], registry=get_registry(self.coordinator))

    async def _cmd_quit(self, args=None) -> None:
        print("Shutting down...")
        self.running = False

    def _resolve(self, name: str) -> Optional[IdentityToken]:
        """Accept either a component id ("tab_a") or a token ("demo:1")."""
        instance = self.coordinator.find(name)
        if instance is not None:
            return instance.token
        try:
            return parse_token(name)
        except ValueError:
            print(f"Unknown component: {name}")
            return None
