"""Helpers shared by the commit and pull request commands."""

import argparse
import time

from gitdraft.config import Config
from gitdraft.errors import ExternalToolError, UserCancelled
from gitdraft.llm import DraftGenerator, get_client
from gitdraft.output import Spinner, Style, print_debug
from gitdraft.ui import ConfirmationResult


def apply_shared_overrides(args: argparse.Namespace, config: Config, flow: str) -> None:
    """CLI flags win over env and config file."""
    if args.provider:
        config.provider = args.provider
    if args.confirm_mode:
        config.confirm_mode = args.confirm_mode
    if args.language:
        if flow == "commit":
            config.commit_language = args.language
        else:
            config.pr_language = args.language


def build_generator(args: argparse.Namespace, config: Config, flow: str) -> DraftGenerator:
    client = get_client(
        provider=config.provider,
        model=config.resolve_model(args.model, flow),
        project_id=config.project_id,
        location=config.location,
    )
    return DraftGenerator(client)


def run_with_spinner(message: str, style: Style, fn, *args, **kwargs):
    with Spinner(message, style):
        return fn(*args, **kwargs)


def finish_confirmation(result: ConfirmationResult, cancelled_message: str) -> None:
    """Turn a non-successful confirmation run into the matching exception."""
    if result.succeeded:
        return
    if result.cancelled:
        raise UserCancelled(cancelled_message)
    raise ExternalToolError(result.error or "Unknown error")


class Timer:
    """Collects named timings for --verbose."""

    def __init__(self):
        self.timings: dict[str, float] = {}
        self._start = time.time()

    def mark(self, name: str) -> None:
        now = time.time()
        self.timings[name] = now - self._start
        self._start = now

    def __str__(self) -> str:
        return ", ".join(f"{name}={value:.2f}s" for name, value in self.timings.items())


def print_generation_stats(generator: DraftGenerator, timer: Timer, style: Style, verbose: bool) -> None:
    if not verbose:
        return
    prompt = generator.last_prompt
    print_debug(f"Provider: {generator.name}", style)
    print_debug(f"Prompt: ~{len(prompt) // 4} tokens ({len(prompt)} chars)", style)
    if generator.last_tokens:
        print_debug(f"Response: {generator.last_tokens} tokens", style)
    if timer.timings:
        print_debug(f"Timings: {timer}", style)
