"""
Protected entity kinds and references.

Every record the service stores belongs to one of a closed set of kinds.
The router resolves the kind once when it is built; downstream code passes
an EntityRef around instead of parsing URL segments.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum

from sgi_core.runtime.errors import BadRequestError, ErrorCode


class EntityKind(str, Enum):
    """Area-scoped record kinds. The value is the route segment."""

    CASO = "casos"
    DOCUMENTO = "documentos"
    PASAPORTE = "pasaportes"
    PERSONA = "personas"
    VEHICULO = "vehiculos"
    EMPRESA = "empresas"
    DIRECCION = "direcciones"
    VISA = "visas"
    IIO = "iios"

    @property
    def table(self) -> str:
        """Name of the PostgreSQL table holding this kind."""
        return _TABLES[self]

    @property
    def display_name(self) -> str:
        """Human-readable name, disclosed in 403 bodies."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_segment(cls, segment: str) -> "EntityKind":
        """Resolve a route segment such as "personas".

        Raises:
            BadRequestError: If the segment does not name a known kind.
        """
        try:
            return cls(segment)
        except ValueError:
            raise BadRequestError(
                "Unsupported entity type", code=ErrorCode.UNSUPPORTED_ENTITY
            ) from None


_TABLES = {
    EntityKind.CASO: "caso",
    EntityKind.DOCUMENTO: "documento",
    EntityKind.PASAPORTE: "pasaporte",
    EntityKind.PERSONA: "persona",
    EntityKind.VEHICULO: "vehiculo",
    EntityKind.EMPRESA: "empresa",
    EntityKind.DIRECCION: "direccion",
    EntityKind.VISA: "visa",
    EntityKind.IIO: "iio",
}

_DISPLAY_NAMES = {
    EntityKind.CASO: "Caso",
    EntityKind.DOCUMENTO: "Documento",
    EntityKind.PASAPORTE: "Pasaporte",
    EntityKind.PERSONA: "Persona",
    EntityKind.VEHICULO: "Vehiculo",
    EntityKind.EMPRESA: "Empresa",
    EntityKind.DIRECCION: "Direccion",
    EntityKind.VISA: "Visa",
    EntityKind.IIO: "IIO",
}


@dataclass(frozen=True)
class EntityRef:
    """A single record of a given kind."""

    kind: EntityKind
    id: str

    def parsed_id(self) -> uuid.UUID | None:
        """Return the id as a UUID, or None if it can never match a row."""
        try:
            return uuid.UUID(str(self.id))
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.kind.value}#{self.id}"
