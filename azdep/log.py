"""Traversal-scoped logging: `org => project => repo => ... => message`."""

import logging

from rich.logging import RichHandler


class TraversalLog(logging.LoggerAdapter):
    def __init__(self, logger: logging.Logger, *path: str) -> None:
        super().__init__(logger, {})
        self.path = path

    def child(self, *parts: str) -> "TraversalLog":
        return TraversalLog(self.logger, *self.path, *parts)

    def process(self, msg, kwargs):
        return " => ".join([*self.path, str(msg)]), kwargs


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )
