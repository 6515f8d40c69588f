"""
Typed product feature maps.

A product's ``features`` column is free-form JSON: string keys mapping to
scalars, arrays, or nested objects. In memory every value is lifted into a
tagged union so callers can branch on ``kind`` instead of probing types::

    ScalarFeature(kind="scalar", value=20)
    ListFeature(kind="list", items=[ScalarFeature(value="A/B testing"), ...])
    MapFeature(kind="map", entries={"seats": ScalarFeature(value=3)})

``to_feature_value()`` lifts raw JSON values; ``feature_to_raw()`` lowers them
back so stored rows keep the plain JSON shape the backend expects.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

Scalar = Union[bool, int, float, str, None]


class ScalarFeature(BaseModel):
    """A single string, number, boolean, or null value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    value: Scalar = None


class ListFeature(BaseModel):
    """An ordered array of feature values."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    items: list[FeatureValue] = []


class MapFeature(BaseModel):
    """A nested object of named feature values."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["map"] = "map"
    entries: dict[str, FeatureValue] = {}


FeatureValue = Annotated[
    Union[ScalarFeature, ListFeature, MapFeature],
    Field(discriminator="kind"),
]

ListFeature.model_rebuild()
MapFeature.model_rebuild()

_VARIANTS = (ScalarFeature, ListFeature, MapFeature)


def to_feature_value(raw: Any) -> Union[ScalarFeature, ListFeature, MapFeature]:
    """Lift a raw JSON value into its tagged variant.

    Args:
        raw: A JSON-compatible value (or an already-lifted variant).

    Returns:
        The matching ``ScalarFeature``, ``ListFeature``, or ``MapFeature``.

    Raises:
        ValueError: If ``raw`` is not JSON-compatible.
    """
    if isinstance(raw, _VARIANTS):
        return raw
    if isinstance(raw, Mapping):
        return MapFeature(entries={str(k): to_feature_value(v) for k, v in raw.items()})
    if isinstance(raw, (list, tuple)):
        return ListFeature(items=[to_feature_value(v) for v in raw])
    if raw is None or isinstance(raw, (bool, int, float, str)):
        return ScalarFeature(value=raw)
    raise ValueError(
        f"Unsupported feature value of type {type(raw).__name__}; "
        "expected a string, number, boolean, null, list, or object."
    )


def feature_to_raw(value: Union[ScalarFeature, ListFeature, MapFeature]) -> Any:
    """Lower a tagged variant back to its plain JSON value."""
    if isinstance(value, ScalarFeature):
        return value.value
    if isinstance(value, ListFeature):
        return [feature_to_raw(v) for v in value.items]
    return {k: feature_to_raw(v) for k, v in value.entries.items()}


def features_from_raw(raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Lift every value of a raw feature map. ``None`` becomes ``{}``."""
    if not raw:
        return {}
    return {str(key): to_feature_value(val) for key, val in raw.items()}


def features_to_raw(features: Mapping[str, Any]) -> dict[str, Any]:
    """Lower every value of a typed feature map."""
    return {key: feature_to_raw(to_feature_value(val)) for key, val in features.items()}
