"""Logging capability passed explicitly into the service."""

import traceback
from abc import ABC, abstractmethod
from typing import Optional

import click


class ModLogger(ABC):
    """Leveled sink for toolkit messages."""

    @abstractmethod
    def debug(self, message: str) -> None: ...

    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def warning(self, message: str) -> None: ...

    @abstractmethod
    def error(self, message: str, exc: Optional[BaseException] = None) -> None: ...


class SilentLogger(ModLogger):
    """Suppresses all output (used for --json mode)."""

    def debug(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str, exc: Optional[BaseException] = None) -> None:
        pass


class ConsoleLogger(ModLogger):
    """Writes to the terminal via click.

    Debug lines only appear when verbose; nothing is printed in JSON mode
    so stdout stays machine-parseable.
    """

    def __init__(self, verbose: bool = False, json_output: bool = False):
        self.verbose = verbose
        self.json_output = json_output

    def debug(self, message: str) -> None:
        if self.verbose and not self.json_output:
            click.echo(f"[DEBUG] {message}")

    def info(self, message: str) -> None:
        if not self.json_output:
            click.echo(message)

    def warning(self, message: str) -> None:
        if not self.json_output:
            click.echo(f"[WARN] {message}")

    def error(self, message: str, exc: Optional[BaseException] = None) -> None:
        if self.json_output:
            return
        click.echo(f"[ERROR] {message}", err=True)
        if exc is not None and self.verbose:
            click.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)


def create_logger(json_output: bool, verbose: bool) -> ModLogger:
    return SilentLogger() if json_output else ConsoleLogger(verbose=verbose)
