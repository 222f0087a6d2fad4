"""Shared helpers."""

from cloudbot.utils.fanout import BoundedFanOut, FanOutResult
from cloudbot.utils.process import CommandResult, run_command

__all__ = ["BoundedFanOut", "CommandResult", "FanOutResult", "run_command"]
