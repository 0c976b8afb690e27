"""mnemo: SM-2 spaced repetition scheduler and review sessions."""

from mnemo.consts import VERSION

__version__ = VERSION
