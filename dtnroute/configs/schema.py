"""
Configuration schema definitions for dtnroute.

This module declares every recognized configuration option per section
together with the converter used to turn raw file values into typed ones,
and the default values applied when an option is absent.
"""

from collections.abc import Callable
from typing import Any

from dtnroute.configs.constants import (
    CONGESTION_SECTION,
    LOGGING_SECTION,
    RL_SECTION,
    ROUTER_SECTION,
)
from dtnroute.domain.config import CongestionConfig, LearningConfig, RouterConfig
from dtnroute.utils.config import optional_int, optional_str, str_to_bool

OPTIONS_DICT: dict[str, dict[str, Callable[..., Any]]] = {
    ROUTER_SECTION: {
        "delete_delivered": str_to_bool,
        "send_queue_mode": str,
        "receipt_expiry": str_to_bool,
    },
    CONGESTION_SECTION: {
        "initial_limit": int,
        "additive_increase": int,
        "multiplicative_decrease": float,
        "alpha": float,
        "initial_cv": float,
    },
    RL_SECTION: {
        "exploration_policy": str,
        "temperature": float,
        "epsilon": float,
        "learning_rate": float,
        "discount_factor": float,
        "randomize": str_to_bool,
        "seed": optional_int,
    },
    LOGGING_SECTION: {
        "log_level": str,
        "log_file": optional_str,
        "log_dir": optional_str,
    },
}

_ROUTER_DEFAULTS = RouterConfig().to_dict()
_ROUTER_DEFAULTS.pop("congestion")

DEFAULTS_DICT: dict[str, dict[str, Any]] = {
    ROUTER_SECTION: _ROUTER_DEFAULTS,
    CONGESTION_SECTION: CongestionConfig().to_dict(),
    RL_SECTION: LearningConfig().to_dict(),
    LOGGING_SECTION: {
        "log_level": "INFO",
        "log_file": None,
        "log_dir": None,
    },
}


def get_converter(section: str, option: str) -> Callable[..., Any] | None:
    """
    Look up the converter for one option.

    :param section: Section name
    :type section: str
    :param option: Option name
    :type option: str
    :return: Converter callable or None when the option is unknown
    :rtype: Callable[..., Any] | None
    """
    return OPTIONS_DICT.get(section, {}).get(option)
