"""Acceptance rules deciding which child an input selects."""
from __future__ import annotations

import re
from typing import Any

from easy_fsm.errors import ConfigurationError
from easy_fsm.types import Matcher


def validate_matcher(matcher: Matcher) -> None:
    """Raise ConfigurationError if *matcher* is not a supported rule."""
    if matcher is None or isinstance(matcher, (str, bytes, re.Pattern)):
        return
    if isinstance(matcher, bool):
        raise ConfigurationError("Boolean matchers are not supported")
    if isinstance(matcher, (int, float)) or callable(matcher):
        return
    raise ConfigurationError(f"Unsupported matcher type: {type(matcher).__name__}")


def accepts(matcher: Matcher, input: Any) -> bool:
    """Return True if *matcher* accepts *input*.

    ``None`` is a wildcard. Literals compare strictly: a string never
    matches bytes or a number. Patterns are searched against the text of
    the input.
    """
    if matcher is None:
        return True
    if isinstance(matcher, (str, bytes)):
        return type(input) is type(matcher) and input == matcher
    if isinstance(matcher, re.Pattern):
        text = input.decode() if isinstance(input, bytes) else str(input)
        if isinstance(matcher.pattern, bytes):
            return matcher.search(text.encode()) is not None
        return matcher.search(text) is not None
    if isinstance(matcher, (int, float)):
        if isinstance(input, bool) or not isinstance(input, (int, float)):
            return False
        return input == matcher
    return bool(matcher(input))
