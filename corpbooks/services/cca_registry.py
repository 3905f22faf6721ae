"""
Depreciation-class (CCA) registry.

Immutable lookup of class identifier -> annual rate and description. The
registry is an object handed to whoever needs it, so an alternative rate
table can be used without touching process-wide state.
"""
from types import MappingProxyType
from typing import Iterable, Mapping

from pydantic import ValidationError

from corpbooks.core.exceptions import ClassNotFoundError, ConfigurationError
from corpbooks.models.fiscal_schemas import DepreciationClass


# Canada Revenue Agency CCA classes (rates as of 2024)
DEFAULT_CCA_CLASSES: tuple[tuple[str, str, str], ...] = (
    ("1", "0.04", "Buildings acquired after 1987"),
    ("3", "0.05", "Buildings acquired before 1988"),
    ("8", "0.20", "Limited-life patents and franchises"),
    ("10", "0.30", "Automobiles, general-purpose electronic data processing equipment"),
    ("12", "1.00", "Computer software"),
    ("13", "0.00", "Leasehold improvements"),
    ("14", "0.05", "Patents, franchises, concessions, or licenses for a limited period"),
    ("16", "0.40", "Taxis, rental cars, buses"),
    ("17", "0.08", "Roads, parking lots, sidewalks, airplane runways, storage areas"),
    ("29", "0.00", "Class 29 assets (manufacturing and processing equipment)"),
    ("38", "0.30", "Photocopiers, fax machines, telephone equipment"),
    ("43", "0.30", "Manufacturing and processing machinery and equipment"),
    ("50", "0.55", "General-purpose electronic data processing equipment and systems software"),
    ("52", "1.00", "Computer software (acquired after March 22, 2004)"),
    ("53", "0.50", "Manufacturing and processing machinery and equipment"),
    ("54", "0.30", "Manufacturing and processing machinery and equipment"),
    ("55", "0.00", "Class 55 assets"),
)


def _sort_key(class_id: str) -> tuple[int, str]:
    return (int(class_id), "") if class_id.isdigit() else (10**9, class_id)


class DepreciationClassRegistry:
    """Read-only table of depreciation classes."""

    def __init__(self, classes: Iterable[DepreciationClass]):
        table: dict[str, DepreciationClass] = {}
        for cca_class in classes:
            if cca_class.class_id in table:
                raise ConfigurationError("cca_classes", f"duplicate class '{cca_class.class_id}'")
            table[cca_class.class_id] = cca_class
        self._classes: Mapping[str, DepreciationClass] = MappingProxyType(table)

    @classmethod
    def from_table(cls, rows: Iterable[tuple]) -> "DepreciationClassRegistry":
        """Build from ``(class_id, rate, description)`` rows."""
        classes = []
        for class_id, rate, description in rows:
            try:
                classes.append(DepreciationClass(class_id=str(class_id), rate=rate, description=description))
            except ValidationError as exc:
                raise ConfigurationError("cca_classes", f"class '{class_id}': {exc.errors()[0]['msg']}") from exc
        return cls(classes)

    @classmethod
    def default(cls) -> "DepreciationClassRegistry":
        return cls.from_table(DEFAULT_CCA_CLASSES)

    def get(self, class_id: str) -> DepreciationClass:
        try:
            return self._classes[class_id]
        except KeyError:
            raise ClassNotFoundError(class_id) from None

    def rate(self, class_id: str):
        return self.get(class_id).rate

    def description(self, class_id: str) -> str:
        return self.get(class_id).description

    def exists(self, class_id: str) -> bool:
        return class_id in self._classes

    def list_all(self) -> list[DepreciationClass]:
        return [self._classes[k] for k in sorted(self._classes, key=_sort_key)]

    def __contains__(self, class_id: object) -> bool:
        return class_id in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"DepreciationClassRegistry({len(self)} classes)"
