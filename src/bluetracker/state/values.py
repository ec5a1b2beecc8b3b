"""Tagged view over persisted JSON values.

State is plain JSON data, but merging needs to know which of three shapes a
value has. :func:`classify` is the single place that answers that, so the
merge rules can dispatch over a closed set of tags instead of sprinkling
``isinstance`` checks around.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any


class ValueKind(StrEnum):
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAP = "map"


def classify(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` of *value*.

    ``None`` and strings are scalars. Observable views classify like the
    containers they wrap because they implement the matching ABCs.
    """
    if isinstance(value, Mapping):
        return ValueKind.MAP
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR
