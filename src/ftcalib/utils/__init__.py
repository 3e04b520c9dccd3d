from . import logging

__all__ = [
    "logging",
]


def __dir__():
    return __all__
