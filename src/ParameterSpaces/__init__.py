"""
Parameter spaces: configuration representation and variation operators.
"""

from .base_space import ParameterSpaceProvider
from .parameter_space import (
    Configuration,
    Parameter,
    IntegerParameter,
    RealParameter,
    CategoricalParameter,
    ParameterSpace
)

__all__ = [
    'ParameterSpaceProvider',
    'Configuration',
    'Parameter',
    'IntegerParameter',
    'RealParameter',
    'CategoricalParameter',
    'ParameterSpace'
]
