"""
Calendar-driven RCON command scheduling.

Commands are registered per period before the client connects. Each date
update from the server selects the commands whose period boundary was hit
and expands date placeholders in them.
"""

import enum
import logging
from typing import Dict, List, Union

from .dates import GameDate

logger = logging.getLogger(__name__)


class Period(str, enum.Enum):
    DAILY = 'daily'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'


def expand_template(template: str, date: GameDate) -> str:
    """
    Substitute date placeholders in a command template.

    %Y -> 4-digit year, %M -> 2-digit month, %D -> 2-digit day. Every
    occurrence is replaced.
    """
    return (template
            .replace('%Y', f"{date.year:04d}")
            .replace('%M', f"{date.month:02d}")
            .replace('%D', f"{date.day:02d}"))


class CommandScheduler:
    """Holds the registered command templates for each period."""

    def __init__(self):
        self._commands: Dict[Period, List[str]] = {period: [] for period in Period}
        self._frozen = False

    def register(self, period: Union[Period, str], command: str) -> None:
        """
        Register an RCON command template for a period.

        Args:
            period: 'daily', 'monthly' or 'yearly'
            command: Command text, may contain %Y, %M and %D

        Raises:
            ValueError: If period is not a known period
            RuntimeError: If called after the client started connecting
        """
        try:
            period = Period(period)
        except ValueError:
            raise ValueError(f"bad period {period!r}") from None
        if self._frozen:
            raise RuntimeError("Commands must be registered before the client connects")
        self._commands[period].append(command)
        logger.debug("Registered %s command: %s", period.value, command)

    def freeze(self) -> None:
        """Reject further registrations."""
        self._frozen = True

    def commands(self, period: Union[Period, str]) -> List[str]:
        """Templates registered for a period, in registration order."""
        return list(self._commands[Period(period)])

    def commands_for(self, date: GameDate) -> List[str]:
        """
        Expanded commands to run for a date change.

        Daily commands always fire, monthly ones on the 1st of the month and
        yearly ones on January 1st, in that order.
        """
        templates = list(self._commands[Period.DAILY])
        if date.day == 1:
            templates.extend(self._commands[Period.MONTHLY])
            if date.month == 1:
                templates.extend(self._commands[Period.YEARLY])
        return [expand_template(template, date) for template in templates]

    def __repr__(self) -> str:
        counts = ', '.join(f"{p.value}={len(c)}" for p, c in self._commands.items())
        return f"CommandScheduler({counts})"
