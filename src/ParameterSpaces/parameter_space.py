"""
Parameter Space

Ordered list of typed solver parameters with the variation operators the
configurator needs.

Parameter file format (JSON):

    {
        "parameters": [
            {"name": "restarts", "type": "integer", "low": 1, "high": 1000},
            {"name": "decay", "type": "real", "low": 0.5, "high": 1.0},
            {"name": "heuristic", "type": "categorical", "values": ["vsids", "berkmin"]}
        ]
    }

A plain ``{"name": [values], ...}`` object is read as categorical parameters.
"""

import json
import random
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ga_constants import OperatorNames
from ga_exceptions import CrossoverError, ParameterSpaceError
from ParameterSpaces.base_space import ParameterSpaceProvider


class Configuration(Mapping):
    """
    Ordered, hashable assignment of parameter values.

    Equality compares every assignment. Values can be changed in place by
    mutation, so a configuration must not be mutated while it is used as a
    dict key.
    """

    def __init__(self, values: Dict[str, Any]):
        self._values = dict(values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any):
        if name not in self._values:
            raise ParameterSpaceError(f"Unknown parameter '{name}'", parameter=name)
        self._values[name] = value

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Configuration):
            return NotImplemented
        return list(self._values.items()) == list(other._values.items())

    def __hash__(self) -> int:
        return hash(tuple(self._values.items()))

    def __repr__(self) -> str:
        return f"Configuration({self._values!r})"


class Parameter:
    """Base class of a named solver parameter."""

    type_name = ""

    def __init__(self, name: str, prefix: Optional[str] = None):
        if not name:
            raise ParameterSpaceError("Parameter name cannot be empty")
        self.name = name
        self.prefix = prefix if prefix is not None else f"-{name}"

    def sample(self, rng: random.Random) -> Any:
        raise NotImplementedError

    def mutate(self, value: Any, step_factor: float, rng: random.Random) -> Any:
        raise NotImplementedError

    def validate(self, value: Any) -> Any:
        raise NotImplementedError

    def format(self, value: Any) -> str:
        return str(value)

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'type': self.type_name, 'prefix': self.prefix}


class _NumericParameter(Parameter):

    def __init__(self, name: str, low, high, prefix: Optional[str] = None):
        super().__init__(name, prefix)
        if low > high:
            raise ParameterSpaceError(f"Parameter '{name}' has low ({low}) > high ({high})", parameter=name)
        self.low = low
        self.high = high

    def _clamp(self, value):
        return max(self.low, min(self.high, value))

    def _step(self, value, step_factor: float, rng: random.Random) -> float:
        """Gaussian step with standard deviation proportional to the range."""
        return value + rng.gauss(0.0, step_factor * (self.high - self.low))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(low=self.low, high=self.high)
        return data


class IntegerParameter(_NumericParameter):
    type_name = "integer"

    def __init__(self, name: str, low: int, high: int, prefix: Optional[str] = None):
        super().__init__(name, int(low), int(high), prefix)

    def sample(self, rng: random.Random) -> int:
        return rng.randint(self.low, self.high)

    def mutate(self, value: int, step_factor: float, rng: random.Random) -> int:
        return int(self._clamp(round(self._step(value, step_factor, rng))))

    def validate(self, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
            raise ParameterSpaceError(f"'{self.name}' expects an integer, got {value!r}", parameter=self.name)
        if not self.low <= value <= self.high:
            raise ParameterSpaceError(f"'{self.name}' value {value} outside [{self.low}, {self.high}]",
                                      parameter=self.name)
        return int(value)


class RealParameter(_NumericParameter):
    type_name = "real"

    def __init__(self, name: str, low: float, high: float, prefix: Optional[str] = None):
        super().__init__(name, float(low), float(high), prefix)

    def sample(self, rng: random.Random) -> float:
        return rng.uniform(self.low, self.high)

    def mutate(self, value: float, step_factor: float, rng: random.Random) -> float:
        return float(self._clamp(self._step(value, step_factor, rng)))

    def validate(self, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ParameterSpaceError(f"'{self.name}' expects a number, got {value!r}", parameter=self.name)
        if not self.low <= value <= self.high:
            raise ParameterSpaceError(f"'{self.name}' value {value} outside [{self.low}, {self.high}]",
                                      parameter=self.name)
        return float(value)

    def format(self, value: float) -> str:
        return f"{value:.6g}"


class CategoricalParameter(Parameter):
    type_name = "categorical"

    def __init__(self, name: str, values: Sequence[Any], prefix: Optional[str] = None):
        super().__init__(name, prefix)
        if not values:
            raise ParameterSpaceError(f"Parameter '{name}' must have a non-empty list of values", parameter=name)
        self.values = list(values)

    def sample(self, rng: random.Random) -> Any:
        return rng.choice(self.values)

    def mutate(self, value: Any, step_factor: float, rng: random.Random) -> Any:
        others = [candidate for candidate in self.values if candidate != value]
        if not others:
            return value
        return rng.choice(others)

    def validate(self, value: Any) -> Any:
        if value not in self.values:
            raise ParameterSpaceError(f"'{self.name}' value {value!r} not in {self.values}", parameter=self.name)
        return value

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['values'] = list(self.values)
        return data


PARAMETER_TYPES = {
    IntegerParameter.type_name: IntegerParameter,
    RealParameter.type_name: RealParameter,
    CategoricalParameter.type_name: CategoricalParameter,
}


class ParameterSpace(ParameterSpaceProvider):
    """
    Reference parameter space over an ordered list of parameters.

    Crossover cuts along the parameter order; mutation changes each gene
    independently with the given probability.
    """

    def __init__(self, parameters: Sequence[Parameter]):
        if not parameters:
            raise ParameterSpaceError("Parameter space needs at least one parameter")
        names = [parameter.name for parameter in parameters]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ParameterSpaceError(f"Duplicate parameter names: {duplicates}")
        self.parameters = list(parameters)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParameterSpace':
        """Build a space from the parameter file structure."""
        if 'parameters' not in data:
            return cls([CategoricalParameter(name, values) for name, values in data.items()])

        parameters = []
        for spec in data['parameters']:
            spec = dict(spec)
            type_name = spec.pop('type', None)
            parameter_class = PARAMETER_TYPES.get(type_name)
            if parameter_class is None:
                raise ParameterSpaceError(f"Unknown parameter type '{type_name}'", parameter=spec.get('name'))
            try:
                parameters.append(parameter_class(**spec))
            except TypeError as e:
                raise ParameterSpaceError(f"Invalid parameter definition {spec}: {e}",
                                          parameter=spec.get('name')) from e
        return cls(parameters)

    @classmethod
    def from_json_file(cls, file_path: str) -> 'ParameterSpace':
        """
        Load a parameter space from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ParameterSpaceError: If the file is not valid JSON or defines bad parameters
        """
        with open(file_path, 'r') as file:
            try:
                data = json.load(file)
            except json.JSONDecodeError as e:
                raise ParameterSpaceError(f"Invalid JSON in parameter file '{file_path}': {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {'parameters': [parameter.to_dict() for parameter in self.parameters]}

    @property
    def names(self) -> List[str]:
        return [parameter.name for parameter in self.parameters]

    def random_config(self, rng: random.Random) -> Configuration:
        return Configuration({parameter.name: parameter.sample(rng) for parameter in self.parameters})

    def crossover(self, config1: Configuration, config2: Configuration,
                  rng: random.Random, operator: str = OperatorNames.ONE_POINT) -> Configuration:
        return self.crossover_pair(config1, config2, rng, operator)[0]

    def crossover_pair(self, config1: Configuration, config2: Configuration,
                       rng: random.Random, operator: str = OperatorNames.ONE_POINT) -> Tuple[Configuration, Configuration]:
        """
        Cut both parents at the same points and swap the middle segments.

        One-point crossover cuts once in [1, n-1]; two-point crossover cuts
        twice. Spaces too small for the requested cuts fall back to fewer.
        """
        if operator not in OperatorNames.CROSSOVER_OPERATORS:
            raise CrossoverError(f"Unknown crossover operator '{operator}'")
        names = self.names
        for config in (config1, config2):
            if list(config.keys()) != names:
                raise CrossoverError(f"Configuration does not belong to this space: {config!r}")

        n = len(names)
        if n < 2:
            return Configuration(config1), Configuration(config2)
        if operator == OperatorNames.TWO_POINT and n >= 3:
            start, end = sorted(rng.sample(range(1, n), 2))
        else:
            start, end = rng.randint(1, n - 1), n

        child1, child2 = {}, {}
        for index, name in enumerate(names):
            swapped = start <= index < end
            child1[name] = config2[name] if swapped else config1[name]
            child2[name] = config1[name] if swapped else config2[name]
        return Configuration(child1), Configuration(child2)

    def mutate(self, config: Configuration, step_factor: float, probability: float, rng: random.Random):
        for parameter in self.parameters:
            if rng.random() < probability:
                config[parameter.name] = parameter.mutate(config[parameter.name], step_factor, rng)

    def validate(self, config: Mapping) -> Configuration:
        """Check a value map against the space and return it as a Configuration."""
        unknown = set(config) - set(self.names)
        if unknown:
            raise ParameterSpaceError(f"Unknown parameters: {sorted(unknown)}")
        values = {}
        for parameter in self.parameters:
            if parameter.name not in config:
                raise ParameterSpaceError(f"Missing parameter '{parameter.name}'", parameter=parameter.name)
            values[parameter.name] = parameter.validate(config[parameter.name])
        return Configuration(values)

    def canonical_name(self, config: Configuration) -> str:
        return " ".join(f"{parameter.name}={parameter.format(config[parameter.name])}"
                        for parameter in self.parameters)

    def command_line(self, config: Configuration) -> str:
        """Solver arguments of a configuration, e.g. ``-restarts 100 -decay 0.95``."""
        return " ".join(f"{parameter.prefix} {config[parameter.name]}" for parameter in self.parameters)

    def serialize(self, config: Configuration) -> str:
        return json.dumps(dict(config))

    def deserialize(self, text: str) -> Configuration:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParameterSpaceError(f"Invalid serialized configuration: {e}") from e
        if not isinstance(data, dict):
            raise ParameterSpaceError(f"Serialized configuration must be an object, got {type(data).__name__}")
        return self.validate(data)

    def __len__(self) -> int:
        return len(self.parameters)
