"""
Abstract decoder interfaces for the catalog importer.

Concrete decoders (category hierarchy, positions) implement CatalogDecoder so
the orchestrator can pick one per file extension and treat them uniformly.
"""

from __future__ import annotations

import abc
from typing import Protocol, Sequence, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class CatalogDecoder(Protocol):
    """
    Common interface all legacy file decoders implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    extension : str
        Lower-case file extension (with dot) the decoder handles.
    """

    name: str
    extension: str

    def decode(self, text: str, source_file: str) -> Sequence[BaseModel]:
        """
        Decode already-decoded file text into records.

        Parameters
        ----------
        text : str
            Full file content as Unicode text.
        source_file : str
            File name recorded on every record for provenance.

        Returns
        -------
        Sequence[BaseModel]
            A fresh list of immutable records, in file order.
        """
        ...


class AbstractCatalogDecoder(abc.ABC):
    """
    ABC helper for class-based decoders.

    Subclasses set `name` and `extension` and implement `decode`.
    """

    name: str
    extension: str

    @abc.abstractmethod
    def decode(self, text: str, source_file: str) -> Sequence[BaseModel]:  # pragma: no cover
        """Decode text into records."""
        raise NotImplementedError


__all__ = [
    "CatalogDecoder",
    "AbstractCatalogDecoder",
]
