from .dimension import Dimension, count_decimal_places, format_value, round_half_up
from .space import SearchSpace

__all__ = [
    'Dimension',
    'SearchSpace',
    'count_decimal_places',
    'format_value',
    'round_half_up',
]
