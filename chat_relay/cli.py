"""Command line entry point: run the relay server or chat from a terminal."""

from __future__ import annotations

from pathlib import Path

import click

from .config.app_config import get_app_config
from .config.providers import get_provider_table
from .config.relay_config import get_client_config
from .models.enums import MessageRole
from .services.chat_session import ChatSession
from .services.relay_client import RelayClient
from .services.session_store import SessionStore
from .utils.logger import setup_logging

LABELS = {
    MessageRole.USER.value: "You",
    MessageRole.SYSTEM.value: "System",
    MessageRole.ASSISTANT.value: "Assistant",
}

HELP_TEXT = """\
Commands:
  /provider <id>       switch provider (model resets to its default)
  /model <name>        set the model
  /system <text>       set the system prompt used for new conversations
  /temperature <t>     set the sampling temperature (0-2)
  /byok on|off         send your own API key instead of the server's
  /key                 enter your API key (kept in memory only)
  /providers           list providers and default models
  /clear               clear the transcript
  /quit                leave
Anything else is sent as a message."""


def _echo_message(role: str, content: str) -> None:
    click.secho(LABELS.get(role, role), dim=True)
    click.echo(content)
    click.echo()


def _echo_status(session: ChatSession) -> None:
    state = session.state
    byok = "on" if state.use_client_key else "off"
    click.secho(
        f"{state.provider} • {state.model or '(default)'} • temperature {state.temperature:g} • byok {byok}",
        fg="cyan",
    )


def _prompt_api_key(session: ChatSession) -> None:
    try:
        api_key = click.prompt("API key", hide_input=True, default="", show_default=False)
    except click.Abort:
        click.echo()
        click.secho("Key entry cancelled.", fg="yellow")
        return
    session.set_api_key(api_key)


def _handle_command(session: ChatSession, line: str) -> bool:
    """Apply a slash command.  Returns False when the user wants to quit."""
    name, _, arg = line[1:].partition(" ")
    arg = arg.strip()
    try:
        if name in ("quit", "exit"):
            return False
        if name == "help":
            click.echo(HELP_TEXT)
        elif name == "provider":
            session.set_provider(arg)
            _echo_status(session)
        elif name == "model":
            session.set_model(arg)
            _echo_status(session)
        elif name == "system":
            session.set_system(arg)
            click.echo("System prompt updated; it applies to the next new conversation.")
        elif name == "temperature":
            session.set_temperature(float(arg))
            _echo_status(session)
        elif name == "byok":
            if arg not in ("on", "off"):
                raise ValueError("Use /byok on or /byok off")
            session.set_use_client_key(arg == "on")
            if arg == "on" and not session.api_key:
                _prompt_api_key(session)
            _echo_status(session)
        elif name == "key":
            _prompt_api_key(session)
        elif name == "providers":
            for provider in get_provider_table().values():
                click.echo(f"  {provider.id:<12} {provider.default_model}")
        elif name == "clear":
            session.reset()
            click.echo("Transcript cleared.")
        else:
            click.secho(f"Unknown command /{name}. Type /help.", fg="yellow")
    except ValueError as exc:
        click.secho(str(exc), fg="red")
    return True


@click.group()
def cli():
    """chat-relay -- relay chat requests to third-party LLM providers."""


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to APP_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (defaults to APP_PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes (development).")
def serve(host, port, reload):
    """Run the relay HTTP server."""
    import uvicorn

    app_config = get_app_config()
    uvicorn.run(
        "chat_relay.main:app",
        host=host or app_config.app_host,
        port=port or app_config.app_port,
        reload=reload,
        log_config=None,
    )


@cli.command()
@click.option("--server", "server_url", default=None, help="Relay server URL (defaults to CLIENT_SERVER_URL).")
@click.option(
    "--session-file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where settings and transcript are kept.",
)
@click.option(
    "--timeout",
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds to wait for a reply.",
)
def chat(server_url, session_file, timeout):
    """Interactive chat through the relay."""
    # Keep warnings visible without interleaving request logs with the transcript
    setup_logging(get_app_config().model_copy(update={"log_level": "WARNING"}))

    client_config = get_client_config()
    overrides = {}
    if server_url:
        overrides["server_url"] = server_url.rstrip("/")
    if timeout:
        overrides["timeout"] = timeout
    if session_file:
        overrides["session_file"] = session_file
    if overrides:
        client_config = client_config.model_copy(update=overrides)

    store = SessionStore(client_config.session_file)
    session = ChatSession(RelayClient(client_config), store=store)
    if not store.path.exists():
        session.set_system(client_config.system_prompt)

    _echo_status(session)
    for message in session.state.messages:
        _echo_message(message.role, message.content)
    click.secho("Enter to send, /help for commands.", dim=True)

    while True:
        try:
            line = click.prompt("", prompt_suffix="› ", default="", show_default=False)
        except (EOFError, click.Abort):
            click.echo()
            break
        if line.startswith("/"):
            if not _handle_command(session, line):
                break
            continue
        if not line.strip():
            continue
        click.secho("…thinking", dim=True)
        reply = session.send(line)
        if reply is not None:
            _echo_message(reply.role, reply.content)


if __name__ == "__main__":
    cli()
