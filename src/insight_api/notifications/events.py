"""Event types for the notification system.

- ``RawEvent``: envelope with type string + JSON content
- ``InvEvent``: a transaction relayed through the API, as an inv summary
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from insight_api.explorer.views import InvView


@dataclass(frozen=True)
class RawEvent:
    """Generic event envelope sent to subscribers."""

    type: str
    content: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return asdict(self)


@dataclass(frozen=True)
class InvEvent(RawEvent):
    """Event emitted when a transaction is relayed to the network."""

    type: str = "tx"

    @classmethod
    def from_view(cls, view: InvView) -> InvEvent:
        return cls(content=view.to_json())
