from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger("eventia")


def init_logging(
    level: logging._Level = logging.INFO, config_path: str | Path | None = None
):
    if utils._setup_logging(config_path):
        return
    logging.basicConfig(
        level=level, format="[%(asctime)s][%(levelname)-8s][%(name)s] %(message)s"
    )


from . import utils

from .emitter import Emitter, Listener
from .errors import (
    EmitterError,
    TimedOut,
    Destroyed,
    UnknownEventError,
    PayloadValidationError,
)
from .schema import EventSchema
from .timers import Scheduler, LoopScheduler, ManualScheduler
from .utils.config import EmitterConfig, load_config

EventEmitter = Emitter

__all__ = [
    # submodules
    "utils",
    # logging
    "LOGGER",
    "init_logging",
    # emitter
    "Emitter",
    "EventEmitter",
    "Listener",
    "EventSchema",
    # timers
    "Scheduler",
    "LoopScheduler",
    "ManualScheduler",
    # config
    "EmitterConfig",
    "load_config",
    # errors
    "EmitterError",
    "TimedOut",
    "Destroyed",
    "UnknownEventError",
    "PayloadValidationError",
]
