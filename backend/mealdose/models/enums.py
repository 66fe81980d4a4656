from enum import Enum


class ActivityLevel(str, Enum):
    NORMAL = "normal"
    LIGHT = "light"
    INTENSE = "intense"


class CalculationMode(str, Enum):
    # Carbs + optional correction, defaults fill profile gaps, correction never negative
    SIMPLE = "simple"
    # Requires a complete profile; applies sick/stress/exercise and allows negative correction
    FULL = "full"
