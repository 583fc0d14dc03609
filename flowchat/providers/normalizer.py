"""Decoding of Langflow run responses into the assistant's reply text.

Deployments answer ``/api/v1/run`` with one of a handful of shapes. Each known
shape is modelled as a small pydantic model and decoding is attempted against
them in priority order. A shape that fails validation simply does not match;
nothing in this module raises for malformed input.
"""

from abc import abstractmethod
from collections.abc import Iterator
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, StrictStr, TypeAdapter, ValidationError


class _Shape(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class _TextCandidate(_Shape):
    @abstractmethod
    def candidate(self) -> str: ...


class TextShape(_TextCandidate):
    """``{"text": "..."}``"""

    text: StrictStr

    def candidate(self) -> str:
        return self.text


class MessageShape(_TextCandidate):
    """``{"message": {"text": "..."}}``"""

    message: TextShape

    def candidate(self) -> str:
        return self.message.text


class MessageStringShape(_TextCandidate):
    """``{"message": "..."}``"""

    message: StrictStr

    def candidate(self) -> str:
        return self.message


class _DataShape(_Shape):
    data: TextShape


class MessageDataShape(_TextCandidate):
    """``{"message": {"data": {"text": "..."}}}``"""

    message: _DataShape

    def candidate(self) -> str:
        return self.message.data.text


class InnerOutput(_Shape):
    results: dict[str, Any]


class OuterOutput(_Shape):
    outputs: list[Any]


class NestedRunShape(_Shape):
    """``{"outputs": [{"outputs": [{"results": {...}}]}]}``"""

    outputs: list[Any]


_ShapeT = TypeVar("_ShapeT", bound=_Shape)

_RAW_TEXT = TypeAdapter(StrictStr)

FLAT_SHAPES: tuple[type[_TextCandidate], ...] = (TextShape, MessageShape, MessageStringShape)
RESULT_SHAPES: tuple[type[_TextCandidate], ...] = (TextShape, MessageShape, MessageDataShape)


def _decode(shape: type[_ShapeT], value: Any) -> _ShapeT | None:
    try:
        return shape.model_validate(value)
    except ValidationError:
        return None


def _raw_text(value: Any) -> str | None:
    try:
        return _RAW_TEXT.validate_python(value)
    except ValidationError:
        return None


def _flat_candidates(response: Any) -> Iterator[str]:
    raw = _raw_text(response)
    if raw is not None:
        yield raw
        return
    for shape in FLAT_SHAPES:
        decoded = _decode(shape, response)
        if decoded is not None:
            yield decoded.candidate()


def _nested_candidates(response: Any) -> Iterator[str]:
    nested = _decode(NestedRunShape, response)
    if nested is None:
        return
    for raw_outer in nested.outputs:
        outer = _decode(OuterOutput, raw_outer)
        if outer is None:
            continue
        for raw_inner in outer.outputs:
            inner = _decode(InnerOutput, raw_inner)
            if inner is None:
                continue
            for shape in RESULT_SHAPES:
                decoded = _decode(shape, inner.results)
                if decoded is not None:
                    yield decoded.candidate()


def extract_text(response: Any) -> str | None:
    """Return the reply text carried by ``response`` or ``None``.

    Flat shapes are checked first and win on the first non-empty string. The
    nested run shape is only walked when no flat shape matched; there, blank
    candidates are skipped and the walk continues.
    """
    for text in _flat_candidates(response):
        if text:
            return text

    for text in _nested_candidates(response):
        if text.strip():
            return text
    return None
