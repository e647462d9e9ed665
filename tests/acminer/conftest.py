import pytest

from acminer.codes import string_to_code
from acminer.entries import PatternEntry


@pytest.fixture
def sum2():
    # one 2-input sum: naive and dedicated cost coincide (profit 0)
    return string_to_code("(0,1)(0,2)+")


@pytest.fixture
def prod_of_sum():
    # product of (sum of two inputs) and an input
    return string_to_code("(0,1)(0,2)*(1,3)(1,4)+")


@pytest.fixture
def two_output():
    # same shape, but the inner sum is also an external output
    return string_to_code("(0,1)(0,2)*o(1,3)(1,4)+o", multi_output=True)


@pytest.fixture
def entries(sum2, prod_of_sum):
    return [
        PatternEntry(sum2, [(1,), (2,), (3,)]),
        PatternEntry(prod_of_sum, [(10, 11)]),
        PatternEntry(sum2, []),
        PatternEntry(prod_of_sum, [(20, 21), (30, 31), (40, 41), (50, 51), (60, 61)]),
    ]
