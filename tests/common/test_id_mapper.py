"""
Tests for the IDMapper class.
"""

import pytest

from infoflow.common.id_mapper import IDMapper


class TestIDMapper:
    """Test IDMapper functionality."""

    def test_empty_mapper(self):
        mapper = IDMapper()
        assert mapper.size() == 0
        assert len(mapper) == 0
        assert repr(mapper) == "IDMapper(size=0)"

    def test_from_ids_sorts(self):
        """Internal indices follow sorted vertex ids."""
        mapper = IDMapper.from_ids([10, 3, 7])
        assert mapper.get_internal(3) == 0
        assert mapper.get_internal(7) == 1
        assert mapper.get_internal(10) == 2
        assert mapper.original_ids() == [3, 7, 10]

    def test_bidirectional(self):
        mapper = IDMapper.from_ids([5, 1])
        for original in (1, 5):
            assert mapper.get_original(mapper.get_internal(original)) == original

    def test_contains(self):
        mapper = IDMapper.from_ids([1, 2])
        assert 1 in mapper
        assert 3 not in mapper

    def test_batch(self):
        mapper = IDMapper.from_ids([4, 2, 9])
        assert mapper.get_internal_batch([9, 2]) == [2, 0]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            IDMapper.from_ids([1, 1])

    def test_unknown_ids(self):
        mapper = IDMapper.from_ids([1])
        with pytest.raises(KeyError):
            mapper.get_internal(2)
        with pytest.raises(KeyError):
            mapper.get_original(1)
        with pytest.raises(KeyError):
            mapper.get_original(-1)
