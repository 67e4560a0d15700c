"""Main application entry point for Whisperer."""

import sys
import argparse
import logging
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from . import __version__
from .audio.recorder import Recorder
from .bridge.intents import HostLauncher
from .bridge.notifications import NotificationCenter
from .bridge.transcription_bridge import TranscriptionBridge
from .config import WhispererConfig
from .services.host_app import HostApp
from .services.keyboard_extension import BufferTextProxy, KeyboardExtension
from .services.stats import StatsManager
from .services.transcription_service import TranscriptionService
from .services.vocabulary import VocabularyManager
from .storage.secrets import SecretStore, OPENAI_API_KEY
from .storage.shared_store import SharedStateStore
from .transcription.openai_backend import OpenAITranscriptionBackend

logger = logging.getLogger(__name__)

console = Console()


def setup_logging(config: WhispererConfig, level: str = "INFO", process_name: str = "whisperer") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = Path(config.get('logging.file_path'))
    console_output = config.get('logging.console_output', True)

    # Host and keyboard run side by side; give each its own file
    log_file_path = log_file_path.with_name(f"{log_file_path.stem}-{process_name}{log_file_path.suffix}")
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info(f"Whisperer {process_name} starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_bridge(config: WhispererConfig) -> TranscriptionBridge:
    group_directory = config.get_group_directory()
    store = SharedStateStore(str(group_directory))
    notifications = NotificationCenter(str(group_directory / "notify"))
    return TranscriptionBridge(store, notifications)


def build_host_app(config: WhispererConfig,
                   permission_prompt: Optional[Callable[[], bool]] = None) -> HostApp:
    """Wire the host process; everything is owned by the returned app."""
    bridge = build_bridge(config)
    store = bridge.store

    recorder = Recorder(
        audio_path=bridge.get_audio_file_path(),
        store=store,
        permission_prompt=permission_prompt,
        sample_rate=config.get('audio.sample_rate', 44100),
        chunk_size=config.get('audio.chunk_size', 1024),
        channels=config.get('audio.channels', 1),
    )
    backend = OpenAITranscriptionBackend(
        endpoint=config.get('transcription.endpoint'),
        model=config.get('transcription.model'),
        upload_filename=config.get('transcription.upload_filename'),
        timeout_seconds=config.get_transcription_timeout(),
    )
    stats = StatsManager(store)
    transcription = TranscriptionService(
        bridge=bridge,
        secrets=SecretStore(str(config.get_secrets_path())),
        vocabulary=VocabularyManager(store),
        backend=backend,
        stats=stats,
    )
    return HostApp(bridge, recorder, transcription, stats)


def build_keyboard(config: WhispererConfig, text_proxy: BufferTextProxy,
                   config_path: Optional[str] = None) -> KeyboardExtension:
    return KeyboardExtension(build_bridge(config), text_proxy, HostLauncher(config_path))


def _ask_microphone_permission() -> bool:
    return Confirm.ask("Allow Whisperer to use the microphone?", default=True)


def run_host(config: WhispererConfig, url: Optional[str]) -> None:
    from .ui.host_screen import HostScreen

    app = build_host_app(config, permission_prompt=_ask_microphone_permission)
    app.launch()
    try:
        if url:
            app.open_url(url)
        HostScreen(app, console).run()
    finally:
        app.shutdown()


def run_keyboard(config: WhispererConfig, config_path: Optional[str]) -> None:
    from .ui.keyboard_screen import KeyboardScreen

    text_proxy = BufferTextProxy()
    keyboard = build_keyboard(config, text_proxy, config_path)
    try:
        KeyboardScreen(keyboard, text_proxy, console).run()
    finally:
        keyboard.close()
    console.print(text_proxy.text)


def run_key_command(config: WhispererConfig, args: argparse.Namespace) -> None:
    secrets = SecretStore(str(config.get_secrets_path()))
    if args.key_command == "set":
        value = args.value or Prompt.ask("OpenAI API key", password=True)
        value = value.strip()
        if not value:
            raise ValueError("API key must not be empty")
        secrets.set(OPENAI_API_KEY, value)
        console.print("API key saved", style="green")
    elif args.key_command == "clear":
        secrets.delete(OPENAI_API_KEY)
        console.print("API key removed", style="yellow")
    else:
        if secrets.get(OPENAI_API_KEY):
            console.print("API key is set", style="green")
        else:
            console.print("No API key set", style="bold red")


def run_vocab_command(config: WhispererConfig, args: argparse.Namespace) -> None:
    vocabulary = VocabularyManager(SharedStateStore(str(config.get_group_directory())))
    if args.vocab_command == "add":
        if not vocabulary.add(args.word):
            console.print(f"Not added (empty or already present): {args.word!r}", style="yellow")
    elif args.vocab_command == "remove":
        if not vocabulary.remove(args.index):
            console.print(f"No vocabulary entry at index {args.index}", style="yellow")

    table = Table(title="Custom vocabulary")
    table.add_column("#", justify="right")
    table.add_column("Term")
    for index, term in enumerate(vocabulary.list()):
        table.add_row(str(index), term)
    console.print(table)


def run_stats_command(config: WhispererConfig, args: argparse.Namespace) -> None:
    stats = StatsManager(SharedStateStore(str(config.get_group_directory())))
    if args.stats_command == "reset":
        stats.reset_stats()
    table = Table(title="Usage")
    table.add_column("Metric")
    table.add_column("Total", justify="right")
    table.add_row("Transcriptions", str(stats.get_transcription_count()))
    table.add_row("Words", str(stats.get_word_count()))
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Whisperer - dictation keyboard backed by OpenAI transcription",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: whisperer.yaml if present)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Whisperer v{__version__}"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    host = commands.add_parser("host", help="Run the host app (microphone and transcription)")
    host.add_argument("--url", help="Open URL, e.g. whisperer:// to record or whisperer://help")

    commands.add_parser("keyboard", help="Run the keyboard in this terminal")

    key = commands.add_parser("key", help="Manage the OpenAI API key")
    key_commands = key.add_subparsers(dest="key_command", required=True)
    key_set = key_commands.add_parser("set")
    key_set.add_argument("value", nargs="?", help="Key value (prompted when omitted)")
    key_commands.add_parser("clear")
    key_commands.add_parser("status")

    vocab = commands.add_parser("vocab", help="Manage custom vocabulary")
    vocab_commands = vocab.add_subparsers(dest="vocab_command", required=True)
    vocab_commands.add_parser("list")
    vocab_add = vocab_commands.add_parser("add")
    vocab_add.add_argument("word")
    vocab_remove = vocab_commands.add_parser("remove")
    vocab_remove.add_argument("index", type=int)

    stats = commands.add_parser("stats", help="Show usage statistics")
    stats.add_argument("stats_command", nargs="?", choices=["show", "reset"], default="show")

    return parser


def main(argv: Optional[list] = None) -> None:
    """Main entry point for Whisperer."""
    args = build_parser().parse_args(argv)

    try:
        config = WhispererConfig(args.config)
        setup_logging(config, args.log_level or config.get('logging.level', 'INFO'), args.command)

        if args.command == "host":
            run_host(config, args.url)
        elif args.command == "keyboard":
            run_keyboard(config, args.config)
        elif args.command == "key":
            run_key_command(config, args)
        elif args.command == "vocab":
            run_vocab_command(config, args)
        elif args.command == "stats":
            run_stats_command(config, args)
    except KeyboardInterrupt:
        console.print("\nGoodbye!")
    except (ValueError, OSError) as e:
        console.print(f"Error: {e}", style="bold red")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
