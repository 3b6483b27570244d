"""Interactive command-line front end for deNoise."""

import asyncio
import shlex

from .api import NEWS_RANGES
from .app import DenoiseApp
from .config import ClientConfig, load_config
from .errors import ApiError, AuthError, ProfileWriteError
from .logging import configure_logger, get_logger
from .session import Message

BANNER = """
deNoise: curated news, reports and podcasts

Commands:
  /login <email>         - Sign in
  /signup <email>        - Create an account
  /logout                - Sign out
  /whoami                - Show the signed-in user
  /profile [name=..] [instructions=..]
                         - Show or update your profile
  /news <range> [topics...]
                         - List curated news (daily, weekly, monthly)
  /report <range> <topics...>
                         - Generate a report (daily, weekly, monthly)
  /podcast <range> <topics...>
                         - Generate a podcast
  /history               - Show this session's chat
  /help                  - Show this help
  /exit, /quit           - Exit

Anything else is sent to the assistant.
"""


class CLI:
    """Interactive command-line interface over a DenoiseApp."""

    def __init__(self, app: DenoiseApp) -> None:
        self.app = app
        self.logger = get_logger()

    def _format_message(self, message: Message) -> str:
        lines = [f"{message.role}> {message.content}"]
        for source in message.sources or []:
            lines.append(f"    - {source.title} ({source.date}): {source.snippet}")
        return "\n".join(lines)

    def _whoami(self) -> str:
        user = self.app.user
        if user is None:
            return "Not signed in."
        name = user.display_name or "(no display name)"
        return f"{name} <{user.email}> id={user.id}"

    async def _auth(self, args: list[str], register: bool) -> None:
        if len(args) != 1:
            print(f"Usage: {'/signup' if register else '/login'} <email>")
            return

        action = self.app.sign_up if register else self.app.sign_in
        result = await action(args[0])
        if result.error is not None:
            print(f"\n❌ {result.error}")
            return
        print(f"\n✓ Signed in as {self._whoami()}")

    async def _profile(self, args: list[str]) -> None:
        if not args:
            user = self.app.user
            print(self._whoami())
            if user is not None and user.system_instructions:
                print(f"Instructions: {user.system_instructions}")
            return

        updates: dict[str, str] = {}
        for arg in args:
            key, sep, value = arg.partition("=")
            if not sep or key not in ("name", "instructions"):
                print("Usage: /profile [name=...] [instructions=...]")
                return
            updates["display_name" if key == "name" else "system_instructions"] = value

        try:
            await self.app.update_profile(**updates)
        except ProfileWriteError as e:
            print(f"\n⚠ Saved locally, but the server rejected the update: {e}. Try again.")
            return
        print("\n✓ Profile updated")

    async def _report(self, args: list[str]) -> None:
        if len(args) < 2 or args[0] not in NEWS_RANGES:
            print("Usage: /report <daily|weekly|monthly> <topics...>")
            return

        print("\n⏳ Generating report...")
        report = await self.app.generate_report(args[0], " ".join(args[1:]))
        print(f"\n{report.content}\n\n(generated {report.generated_at})")

    async def _news(self, args: list[str]) -> None:
        if not args or args[0] not in NEWS_RANGES:
            print("Usage: /news <daily|weekly|monthly> [topics...]")
            return

        news = await self.app.fetch_news(args[0], " ".join(args[1:]))
        if not news:
            print("\nNo news found.")
        for item in news:
            print(f"\n{item.title} ({item.date})\n    {item.text}")

    async def _podcast(self, args: list[str]) -> None:
        if len(args) < 2 or args[0] not in NEWS_RANGES:
            print("Usage: /podcast <daily|weekly|monthly> <topics...>")
            return

        print("\n⏳ Generating podcast...")
        podcast = await self.app.generate_podcast(" ".join(args[1:]), time_window=args[0])
        print(f"\n🎧 {podcast.audio_url}")

    async def _process_message(self, message: str) -> None:
        reply = await self.app.send_message(message)
        if reply is not None:
            print("\n" + self._format_message(reply))

    async def _handle_command(self, command: str) -> bool:
        """Handle a special command. Returns True if should continue, False to exit."""
        try:
            parts = shlex.split(command)
        except ValueError as e:
            print(f"\n❌ {e}")
            return True
        if not parts:
            return True

        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("/exit", "/quit", "exit", "quit"):
            print("\n👋 Goodbye!")
            return False

        if cmd == "/login":
            await self._auth(args, register=False)
        elif cmd == "/signup":
            await self._auth(args, register=True)
        elif cmd == "/logout":
            self.app.sign_out()
            print("\n✓ Signed out")
        elif cmd == "/whoami":
            print(self._whoami())
        elif cmd == "/profile":
            await self._profile(args)
        elif cmd == "/news":
            await self._news(args)
        elif cmd == "/report":
            await self._report(args)
        elif cmd == "/podcast":
            await self._podcast(args)
        elif cmd == "/history":
            for message in self.app.state.chat_history:
                print(self._format_message(message))
        elif cmd == "/help":
            print(BANNER)

        return True  # Unknown command, continue

    async def _dispatch(self, user_input: str) -> bool:
        try:
            if user_input.startswith("/") or user_input.lower() in ("exit", "quit"):
                return await self._handle_command(user_input)
            await self._process_message(user_input)
        except (AuthError, ApiError, ValueError) as e:
            print(f"\n❌ {e}")
            self.logger.log("error", error=str(e))
        return True

    async def run(self) -> None:
        """Run the interactive CLI."""
        print(BANNER)
        await self.app.start()
        print(self._whoami() + "\n")

        try:
            while True:
                try:
                    loop = asyncio.get_running_loop()
                    # Read off-loop so queued session purges keep running
                    user_input = (await loop.run_in_executor(None, input, "you> ")).strip()
                except (KeyboardInterrupt, EOFError):
                    print("\n👋 Goodbye!")
                    break

                if not user_input:
                    continue

                if not await self._dispatch(user_input):
                    break
        finally:
            await self.app.close()


async def run_cli(config: ClientConfig | None = None) -> None:
    """Run the CLI with configuration from disk and the environment."""
    config = config or load_config()
    configure_logger(config.log_dir)

    cli = CLI(DenoiseApp.from_config(config))
    await cli.run()
