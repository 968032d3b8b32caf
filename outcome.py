"""
Outcome
=======
Tagged result returned by every call to an external service.

Collaborators never raise for availability problems: they hand back
`Ok(data)` or `Err(error)` and the caller picks the fallback.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Ok:
    data: Any

    ok = True
    error = None


@dataclass(frozen=True)
class Err:
    error: str

    ok = False
    data = None


Outcome = Union[Ok, Err]
