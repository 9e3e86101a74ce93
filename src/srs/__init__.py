"""srs: spaced repetition over plain markdown card files."""

from srs.consts import VERSION

__version__ = VERSION
