from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""HeaderColumn domain model and CellType enum.

A HeaderColumn is one named, typed field derived from a spreadsheet column
title. Its type drives the C# field type written into generated data classes.
"""

__all__ = [
    "CellType",
    "HeaderColumn",
]


class CellType(Enum):
    """Cell type assigned to a header column.

    UNDEFINED marks a column whose type has not been assigned yet; such a
    column blocks code generation until a type is set.
    """
    UNDEFINED = "Undefined"
    STRING = "String"
    SHORT = "Short"
    INT = "Int"
    LONG = "Long"
    FLOAT = "Float"
    DOUBLE = "Double"
    BOOL = "Bool"

    @classmethod
    def parse(cls, text: str) -> CellType:
        """Parse a cell type name case-insensitively (``"int"`` -> INT).

        Raises:
            ValueError: If the text names no known cell type.
        """
        key = str(text).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"unknown cell type: {text!r}")

    @property
    def csharp_type(self) -> str:
        """C# type keyword used for generated fields."""
        if self is CellType.UNDEFINED:
            raise ValueError("undefined cell type has no C# counterpart")
        return _CSHARP_TYPES[self]


_CSHARP_TYPES = {
    CellType.STRING: "string",
    CellType.SHORT: "short",
    CellType.INT: "int",
    CellType.LONG: "long",
    CellType.FLOAT: "float",
    CellType.DOUBLE: "double",
    CellType.BOOL: "bool",
}


@dataclass(frozen=True)
class HeaderColumn:
    """A named, typed column of a worksheet schema.

    Names are unique within one schema and the column order is the
    generated field order.
    """
    name: str
    type: CellType = CellType.UNDEFINED

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("header column name must not be empty")

    @property
    def is_undefined(self) -> bool:
        return self.type is CellType.UNDEFINED
