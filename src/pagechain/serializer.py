"""Turn JavaScript functions and Python arguments into page-evaluable source text.

Functions handed to the page run inside the browser's own JavaScript
environment, not in this process.  Only two things cross that boundary:

* the function's **source text** (a ``JSFunction``), and
* its call arguments, each encoded as a JSON literal.

Closures are therefore *not* preserved.  Anything the function needs from
the controller side must be passed explicitly as an argument; a free
variable in the source resolves against the page's globals, or fails there.
This cannot be checked here and is the caller's responsibility.

Example::

    >>> to_expression(JSFunction("(x, y) => x + y"), 2, 3)
    '((x, y) => x + y)(2,3)'
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Final, Union

from pydantic import BaseModel

from pagechain.exceptions import SerializationError


class _Undefined:
    """Type of the ``UNDEFINED`` sentinel."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED: Final = _Undefined()
"""Stands for JavaScript ``undefined``.  ``None`` is sent as ``null``."""


@dataclass(frozen=True, slots=True)
class JSFunction:
    """JavaScript function source to be invoked inside the page.

    The source must be a complete function expression, e.g.
    ``"(sel) => document.querySelector(sel).textContent"`` or
    ``"function () { return document.title; }"``.
    """

    source: str

    def __post_init__(self) -> None:
        if not isinstance(self.source, str) or not self.source.strip():
            raise SerializationError(self.source, "JSFunction source must be a non-empty string")

    def __str__(self) -> str:
        return self.source


PageScript = Union[str, JSFunction]


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, JSFunction) or callable(value):
        raise TypeError("functions cannot be passed as arguments")
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def serialize_arg(value: Any) -> str:
    """Encode a single call argument as a JavaScript literal.

    Raises:
        SerializationError: If the value has no JSON representation
            (cycles, functions, sets, NaN/Infinity, arbitrary objects).
    """
    if value is UNDEFINED:
        return "undefined"
    try:
        return json.dumps(value, allow_nan=False, default=_json_default)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(value, str(exc)) from exc


def serialize_call(fn: JSFunction, *args: Any) -> str:
    """Build ``(source)(arg1,arg2,...)`` for *fn* applied to *args*."""
    return f"({fn.source})({','.join(serialize_arg(arg) for arg in args)})"


def to_expression(fn: PageScript, *args: Any) -> str:
    """Return the text the page should evaluate for *fn* and *args*.

    A plain string is assumed to already be valid page code and is returned
    unchanged (any *args* are ignored).  A ``JSFunction`` is wrapped into an
    immediately-invoked call expression.

    Raises:
        SerializationError: If *fn* is neither a string nor a ``JSFunction``,
            or if any argument cannot be encoded.
    """
    if isinstance(fn, str):
        return fn
    if isinstance(fn, JSFunction):
        return serialize_call(fn, *args)
    if callable(fn):
        raise SerializationError(
            fn, "Python callables cannot run in the page; wrap JavaScript source in JSFunction"
        )
    raise SerializationError(fn, "expected a JavaScript source string or JSFunction")
