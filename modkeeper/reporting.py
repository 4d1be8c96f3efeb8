"""Printing the outcome of adding mods."""

from __future__ import annotations

from typing import Iterable

from .add import AddError, AlreadyAdded

_MAX_PAD = 50


def _style(text: str, code: str) -> str:
    return f"\x1b[{code}m{text}\x1b[0m"


def display_successes_failures(
    successes: Iterable[str], failures: Iterable[tuple[str, AddError]]
) -> bool:
    """Print which mods were added and which failed, grouped by reason.

    Returns whether any failure is a real error; mods that were already
    added only count as warnings.
    """
    successes = list(successes)
    failures = list(failures)
    already_added = str(AlreadyAdded())

    if successes:
        names = ", ".join(_style(name, "1") for name in successes)
        print(f"{_style('Successfully added', '32')} {names}")
    elif len(failures) == 1:
        # The identifier is not worth repeating for a single failure
        message = str(failures[0][1])
        if message == already_added:
            print(_style(message, "33"))
            return False
        print(_style(message, "31"))
        return True

    grouped: dict[str, list[str]] = {}
    for identifier, error in failures:
        grouped.setdefault(str(error), []).append(identifier)

    pad = min(max((len(message) for message in grouped), default=0), _MAX_PAD)
    exit_error = False
    for message, identifiers in grouped.items():
        padded = message.ljust(pad)
        if message == already_added:
            shown = _style(padded, "33")
        else:
            exit_error = True
            shown = _style(padded, "31")
        print(f"{shown}: " + ", ".join(_style(i, "3") for i in identifiers))
    return exit_error