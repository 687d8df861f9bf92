from .basic_math import BasicMath
from parseon.builtin_function import BuiltinFunction
from typing import Dict, List

def populate_math_builtins() -> Dict[str, BuiltinFunction]:
        basic_math = BasicMath()

        def std_sqrt(args: List[float]) -> float:
            return basic_math.sqrt(args[0])

        def std_pow(args: List[float]) -> float:
            return basic_math.pow(args[0], args[1])

        def std_abs(args: List[float]) -> float:
            return basic_math.abs(args[0])

        def std_floor(args: List[float]) -> float:
            return basic_math.floor(args[0])

        return {
            'sqrt': BuiltinFunction('sqrt', 1, std_sqrt),
            'pow': BuiltinFunction('pow', 2, std_pow),
            'abs': BuiltinFunction('abs', 1, std_abs),
            'floor': BuiltinFunction('floor', 1, std_floor),
        }
