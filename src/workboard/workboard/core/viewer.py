from __future__ import annotations

from dataclasses import dataclass

from .enums import Role


@dataclass(frozen=True)
class Viewer:
    """Who is looking at (or writing to) the data.

    Resolved by the auth layer and passed in explicitly; the core never reads it from
    session or global state.
    """

    viewer_id: str
    role: Role

    @property
    def is_privileged(self) -> bool:
        return self.role.is_privileged
