"""Path of the Ascendant Dragon: a text-based wuxia cultivation RPG."""

__version__ = "0.1.0"
