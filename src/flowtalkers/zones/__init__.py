"""Network zone table and classification for FlowTalkers."""

from .models import Colour, ZoneEntry, ZoneTable, ZoneInputs, ZoneNetwork
from .builder import ZoneTableBuilder, build_zone_table
from .classifier import ZoneClassifier, AddressCache, classify

__all__ = [
    "Colour",
    "ZoneEntry",
    "ZoneTable",
    "ZoneInputs",
    "ZoneNetwork",
    "ZoneTableBuilder",
    "build_zone_table",
    "ZoneClassifier",
    "AddressCache",
    "classify",
]
