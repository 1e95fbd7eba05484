from enum import Enum
from typing import Any, Dict, List, Tuple


def enum_dict_factory(items: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """dict_factory for dataclasses.asdict that stores enums by value"""
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}
