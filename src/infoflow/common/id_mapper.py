"""
ID mapping between vertex ids and NetworkIt node indices.

Vertex ids in a flow graph are arbitrary Int64 values (module ids after
coarsening are typically sparse), while NetworkIt requires consecutive
node indices 0..n-1. IDMapper keeps both directions of that mapping.
"""

from typing import Dict, Iterable, List


class IDMapper:
    """
    Bidirectional mapping between vertex ids and internal NetworkIt indices.

    Attributes
    ----------
    original_to_internal : Dict[int, int]
        Maps vertex ids to NetworkIt indices (0, 1, 2, ...)
    internal_to_original : List[int]
        Vertex id of each NetworkIt index

    Examples
    --------
    >>> mapper = IDMapper.from_ids([10, 3, 7])
    >>> mapper.get_internal(3)
    0
    >>> mapper.get_original(2)
    10
    """

    def __init__(self) -> None:
        self.original_to_internal: Dict[int, int] = {}
        self.internal_to_original: List[int] = []

    @classmethod
    def from_ids(cls, ids: Iterable[int]) -> "IDMapper":
        """
        Create a mapper over the given vertex ids.

        Ids are sorted so the same vertex set always yields the same
        internal numbering.

        Raises
        ------
        ValueError
            If an id occurs more than once
        """
        mapper = cls()
        for original_id in sorted(ids):
            mapper.add(original_id)
        return mapper

    def add(self, original_id: int) -> int:
        """
        Assign the next internal index to a new vertex id.

        Returns
        -------
        int
            The internal index assigned

        Raises
        ------
        ValueError
            If original_id is already mapped
        """
        if original_id in self.original_to_internal:
            raise ValueError(f"Vertex id {original_id} is already mapped")
        internal_id = len(self.internal_to_original)
        self.original_to_internal[original_id] = internal_id
        self.internal_to_original.append(original_id)
        return internal_id

    def get_internal(self, original_id: int) -> int:
        """
        Get the NetworkIt index of a vertex id.

        Raises
        ------
        KeyError
            If original_id is not mapped
        """
        try:
            return self.original_to_internal[original_id]
        except KeyError:
            raise KeyError(f"Vertex id {original_id} not found in mapping")

    def get_original(self, internal_id: int) -> int:
        """
        Get the vertex id of a NetworkIt index.

        Raises
        ------
        KeyError
            If internal_id is out of range
        """
        if not 0 <= internal_id < len(self.internal_to_original):
            raise KeyError(f"Internal ID {internal_id} not found in mapping")
        return self.internal_to_original[internal_id]

    def get_internal_batch(self, original_ids: Iterable[int]) -> List[int]:
        """Map a batch of vertex ids to NetworkIt indices."""
        return [self.get_internal(original_id) for original_id in original_ids]

    def original_ids(self) -> List[int]:
        """Vertex ids in internal index order."""
        return list(self.internal_to_original)

    def size(self) -> int:
        """Number of mapped vertices."""
        return len(self.internal_to_original)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, original_id: object) -> bool:
        return original_id in self.original_to_internal

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"
