import enum
from collections.abc import Mapping


__all__ = ("Default", "PropertiesType", "_default")

PropertiesType = Mapping[str, str]


class Default(enum.Enum):
    """
    Used for type hinting kwarg defaults, where ``None`` is a meaningful
    value.
    """

    token = 0


_default = Default.token
