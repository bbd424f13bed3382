"""JSON-compatible typing aliases for raw OpenAPI document nodes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Union

type JSONPrimitive = Union[str, int, float, bool, None]
type JSONValue = Union[JSONPrimitive, Sequence[JSONValue], Mapping[str, JSONValue]]
type JSONObject = Mapping[str, JSONValue]
