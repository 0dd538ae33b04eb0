"""CLI entry point for BenchForge."""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

import structlog

from benchforge.auth import AuthClient, AuthError
from benchforge.benchmark import BenchmarkPipeline, BenchmarkServiceClient
from benchforge.config import Settings, StorageBackend, get_settings
from benchforge.formatting import format_size, metric_rows
from benchforge.models import Attachment, Model, ModelDraft, format_from_filename
from benchforge.registry import ModelRegistry
from benchforge.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    RegistryCodec,
)

INVALID_TYPE_MESSAGE = (
    "Invalid file type. Please upload an ONNX (.onnx) or PyTorch (.pt, .pth) file."
)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="benchforge",
        description="BenchForge - register model files and benchmark them",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    add_parser = subparsers.add_parser("add", help="Register a model file")
    add_parser.add_argument("path", type=Path, help="Path to an .onnx, .pt or .pth file")

    run_parser = subparsers.add_parser("run", help="Register a model file and benchmark it")
    run_parser.add_argument("path", type=Path, help="Path to an .onnx, .pt or .pth file")

    subparsers.add_parser("list", help="List registered models and their metrics")

    delete_parser = subparsers.add_parser("delete", help="Delete a registered model")
    delete_parser.add_argument("model_id", help="Model ID")

    for command in ("login", "signup"):
        auth_parser = subparsers.add_parser(command, help=f"{command.capitalize()} with email")
        auth_parser.add_argument("--email", required=True, help="Account email")
        auth_parser.add_argument("--password", help="Account password (prompted if omitted)")

    subparsers.add_parser("logout", help="End the current session")

    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging("DEBUG" if args.verbose or settings.debug else settings.log_level)

    handlers = {
        "add": cmd_add,
        "run": cmd_run,
        "list": cmd_list,
        "delete": cmd_delete,
        "login": cmd_login,
        "signup": cmd_signup,
        "logout": cmd_logout,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    registry = ModelRegistry.load(create_store(settings), RegistryCodec(settings.storage.key))
    return handler(args, registry, settings)


def configure_logging(level: str) -> None:
    """Set the minimum structlog level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )


def create_store(settings: Settings) -> KeyValueStore:
    """Build the configured storage backend."""
    if settings.storage.backend == StorageBackend.MEMORY:
        return InMemoryKeyValueStore()
    return FileKeyValueStore(settings.storage.directory)


def _read_model(path: Path) -> ModelDraft | None:
    if format_from_filename(path.name) is None:
        print(INVALID_TYPE_MESSAGE, file=sys.stderr)
        return None
    try:
        attachment = Attachment.from_path(path)
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return None
    return ModelDraft.from_attachment(attachment)


def _print_model(model: Model) -> None:
    print(f"{model.id}  {model.name}")
    print(
        f"  Format: {model.format.upper()} | Size: {format_size(model.size)}"
        f" | Added: {model.created_at.date().isoformat()}"
    )
    if model.benchmark_results is not None:
        for label, value in metric_rows(model.benchmark_results):
            print(f"  {label}: {value}")
    elif not ModelRegistry.is_available_for_benchmark(model):
        print("  File unavailable")


def cmd_add(args: argparse.Namespace, registry: ModelRegistry, settings: Settings) -> int:
    """Register a model file."""
    draft = _read_model(args.path)
    if draft is None:
        return 1
    model = registry.add_model(draft)
    print(f'Model "{model.name}" added with ID {model.id}')
    return 0


def cmd_run(args: argparse.Namespace, registry: ModelRegistry, settings: Settings) -> int:
    """Register a model file and benchmark it in the same session."""
    draft = _read_model(args.path)
    if draft is None:
        return 1
    model = registry.add_model(draft)
    print("Running benchmark... This may take a moment.")

    async def _run() -> bool:
        async with BenchmarkServiceClient(settings.benchmark_service) as client:
            outcome = await BenchmarkPipeline(registry, client).benchmark_model(model.id)
        if not outcome.succeeded:
            print(f"Benchmark failed: {outcome.message}", file=sys.stderr)
        return outcome.succeeded

    if not asyncio.run(_run()):
        return 1

    print("Benchmark completed!")
    benchmarked = registry.get_model(model.id)
    if benchmarked is not None:
        _print_model(benchmarked)
    return 0


def cmd_list(args: argparse.Namespace, registry: ModelRegistry, settings: Settings) -> int:
    """List registered models."""
    if not registry.models:
        print("No models added yet.")
        return 0
    for model in registry.models:
        _print_model(model)
    return 0


def cmd_delete(args: argparse.Namespace, registry: ModelRegistry, settings: Settings) -> int:
    """Delete a registered model."""
    model = registry.get_model(args.model_id)
    if model is None or not registry.delete_model(args.model_id):
        print(f"Model not found: {args.model_id}", file=sys.stderr)
        return 1
    print(f'Model "{model.name}" deleted.')
    return 0


def _password(args: argparse.Namespace) -> str:
    return args.password or getpass.getpass("Password: ")


def cmd_login(args: argparse.Namespace, registry: ModelRegistry, settings: Settings) -> int:
    """Log in and record the session."""

    async def _login() -> None:
        async with AuthClient(settings.auth_service) as client:
            user = await client.login(args.email, _password(args))
        registry.login(user)

    try:
        asyncio.run(_login())
    except AuthError as e:
        print(f"Login failed: {e}", file=sys.stderr)
        return 1
    print("Login successful!")
    return 0


def cmd_signup(args: argparse.Namespace, registry: ModelRegistry, settings: Settings) -> int:
    """Create an account."""

    async def _signup() -> str:
        async with AuthClient(settings.auth_service) as client:
            result = await client.signup(args.email, _password(args))
        return result.message

    try:
        message = asyncio.run(_signup())
    except AuthError as e:
        print(f"Signup failed: {e}", file=sys.stderr)
        return 1
    print(message)
    return 0


def cmd_logout(args: argparse.Namespace, registry: ModelRegistry, settings: Settings) -> int:
    """End the current session."""
    registry.logout()
    print("Logged out successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
