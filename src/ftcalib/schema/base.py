"""Base classes for the calibration models.

This module provides the foundational classes used throughout the schema package.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict


# (name, flavor, tagger, operating point, jet algorithm)
IdentityKey = Tuple[str, str, str, str, str]

_UNSET = object()


class SubscriptableModel(BaseModel):
    """A Pydantic BaseModel that supports dictionary-style item access."""

    def __getitem__(self, key):
        """Allows dictionary-style `model[key]` access."""
        return getattr(self, key)

    def __setitem__(self, key, value):
        """Allows dictionary-style `model[key] = value` assignment."""
        return setattr(self, key, value)

    def __contains__(self, key):
        """Allows `key in model` checks."""
        return hasattr(self, key)

    def get(self, key, default=None):
        """Allows `.get(key, default)` method."""
        return getattr(self, key, default)

    def pop(self, key, default=_UNSET):
        """
        Remove a field from the model and return its value.

        Mirrors dict.pop semantics: raises KeyError if missing and no default
        is provided, otherwise returns the default.
        """
        if hasattr(self, key):
            value = getattr(self, key)
            self.__dict__.pop(key, None)
            fields_set = getattr(self, "model_fields_set", None)
            if fields_set is not None:
                fields_set.discard(key)
            return value
        if default is _UNSET:
            raise KeyError(key)
        return default


class FrozenModel(SubscriptableModel):
    """
    Read-only model for parsed calibration entities.

    Instances are built once by the parser (or by ``model_copy(update=...)``
    in the filtering helpers) and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    def __setitem__(self, key, value):
        raise TypeError(f"{type(self).__name__} is read-only")

    def pop(self, key, default=_UNSET):
        raise TypeError(f"{type(self).__name__} is read-only")


class AnalysisKeyModel(FrozenModel):
    """Fields shared by everything that addresses an analysis by identity key."""

    name: str
    flavor: str
    tagger: str
    operating_point: str
    jet_algorithm: str

    @property
    def identity(self) -> IdentityKey:
        """The 5-tuple (name, flavor, tagger, operating point, jet algorithm)."""
        return (
            self.name,
            self.flavor,
            self.tagger,
            self.operating_point,
            self.jet_algorithm,
        )
