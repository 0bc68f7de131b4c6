# tbx/models/config.py

"""
Classification configuration.

Every field has a default so a missing or partial config file still yields
a usable engine. Field names are accepted in snake_case or camelCase.
"""

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Thresholds(_FrozenModel):
    """Similarity cutoffs and per-signal score constants."""

    renumbered_similarity: float = Field(0.92, ge=0, le=1)
    memory_exact_match: float = Field(1.0, ge=0, le=1)
    keyword_match: float = Field(0.85, ge=0, le=1)
    parent_match: float = Field(0.80, ge=0, le=1)
    fuzzy_match: float = Field(0.75, ge=0, le=1)
    needs_review_below: int = Field(70, ge=0, le=100)


class Weights(_FrozenModel):
    """Contribution of each signal to the confidence score."""

    memory: float = Field(0.50, ge=0)
    keyword: float = Field(0.25, ge=0)
    parent: float = Field(0.15, ge=0)
    fuzzy: float = Field(0.10, ge=0)


class KeywordRule(_FrozenModel):
    """Trigger keywords for one category, checked in order."""

    category: str
    keywords: tuple[str, ...] = ()

    @field_validator("keywords", mode="before")
    @classmethod
    def _single_keyword(cls, value: Any):
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value


class ClassificationConfig(_FrozenModel):
    """Immutable configuration for one classification run."""

    thresholds: Thresholds = Field(default_factory=Thresholds)
    weights: Weights = Field(default_factory=Weights)
    keywords: tuple[KeywordRule, ...] = ()
    ontology: Mapping[str, str] = Field(default_factory=lambda: MappingProxyType({}))

    @field_validator("thresholds", "weights", mode="before")
    @classmethod
    def _empty_section(cls, value: Any):
        return {} if value is None else value

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords_from_mapping(cls, value: Any):
        # Config files use {category: [keywords]}; order is preserved
        if value is None:
            return ()
        if isinstance(value, dict):
            return [
                {"category": str(category), "keywords": keywords}
                for category, keywords in value.items()
            ]
        return value

    @field_validator("ontology", mode="before")
    @classmethod
    def _stringify_prefixes(cls, value: Any):
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {str(prefix): str(category) for prefix, category in value.items()}
        return value

    @field_validator("ontology")
    @classmethod
    def _read_only_ontology(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("ontology")
    def _dump_ontology(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)
