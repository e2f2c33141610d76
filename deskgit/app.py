"""Bootstrap: logging setup and wiring for the changes store and progress parsers."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from deskgit.core.config import DeskgitConfig
from deskgit.core.events import EventBus
from deskgit.exceptions import ConfigError
from deskgit.progress.git import (
    CheckoutProgressParser,
    CloneProgressParser,
    FetchProgressParser,
    PullProgressParser,
    PushProgressParser,
)
from deskgit.progress.lfs import GitLFSProgressParser
from deskgit.progress.operations import (
    OperationCallback,
    OperationKind,
    remote_operation_progress,
)
from deskgit.progress.reporter import ProgressReporter
from deskgit.state.stats import InMemoryStatsStore
from deskgit.state.store import ChangesStore

if TYPE_CHECKING:
    from deskgit.progress.git import GitProgressParser
    from deskgit.state.stats import StatsStore

logger = structlog.get_logger()

_PARSERS: dict[str, type[GitProgressParser]] = {
    "clone": CloneProgressParser,
    "fetch": FetchProgressParser,
    "pull": PullProgressParser,
    "push": PushProgressParser,
    "checkout": CheckoutProgressParser,
}


def _file_handler(log_dir: Path, config: DeskgitConfig) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / "deskgit.log",
        maxBytes=config.log_max_bytes,
        backupCount=config.log_backup_count,
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
        )
    )
    return handler


def configure_logging(config: DeskgitConfig) -> None:
    """Set up structlog with console output and optional rotating JSON file handler."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(),
        )
    )
    root_logger.addHandler(console_handler)

    if config.log_dir is not None:
        root_logger.addHandler(_file_handler(config.log_dir, config))

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_changes_store(
    config: DeskgitConfig,
    *,
    event_bus: EventBus | None = None,
    stats: StatsStore | None = None,
) -> ChangesStore:
    store = ChangesStore(
        stats=stats if stats is not None else InMemoryStatsStore(),
        event_bus=event_bus if event_bus is not None else EventBus(),
        clear_partial_selection=config.clear_partial_selection_on_refresh,
    )
    logger.debug(
        "changes_store_built",
        clear_partial_selection=config.clear_partial_selection_on_refresh,
    )
    return store


def build_progress_reporters(
    config: DeskgitConfig,
    kind: OperationKind,
    title: str,
    callback: OperationCallback,
    *,
    remote: str | None = None,
) -> tuple[ProgressReporter, ProgressReporter | None]:
    """Create the stderr reporter and, if enabled, the LFS reporter for one operation.

    Both reporters feed the same operation callback. The initial zero-value
    update is sent before returning.
    """
    parser_cls = _PARSERS.get(kind)
    if parser_cls is None:
        raise ConfigError(f"unknown operation kind: {kind}")
    progress = remote_operation_progress(
        kind,
        title,
        callback,
        remote=remote,
        context_prefixes=config.progress_context_prefixes,
    )
    git_reporter = ProgressReporter(parser_cls(), progress)
    lfs_reporter = (
        ProgressReporter(GitLFSProgressParser(), progress)
        if config.track_lfs_progress
        else None
    )
    progress.start()
    return git_reporter, lfs_reporter
