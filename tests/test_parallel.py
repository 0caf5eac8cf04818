"""Tests for the joblib fork-join helpers."""

import operator

import pytest

from graphvcf.parallel import ParallelProcessor, parallel_reduce


def _square(x):
    return x * x


def test_inline_map():
    assert ParallelProcessor(n_jobs=1).map(_square, range(5)) == [0, 1, 4, 9, 16]


def test_threaded_map_keeps_order():
    processor = ParallelProcessor(n_jobs=3, backend="threading")
    assert processor.map(_square, iter(range(20))) == [x * x for x in range(20)]


def test_map_with_progress():
    processor = ParallelProcessor(n_jobs=2, backend="threading")
    assert processor.map(_square, range(4), show_progress=True, total=4) == [0, 1, 4, 9]


def test_parallel_reduce():
    assert parallel_reduce(_square, range(10), operator.add, 0, n_jobs=2, backend="threading") == 285


def test_unknown_backend():
    with pytest.raises(ValueError):
        ParallelProcessor(backend="ray")


def test_all_cpus():
    assert ParallelProcessor(n_jobs=-1).n_jobs >= 1
