import pytest

# Small working precision keeps every test case fast; supports < 2240 digits.
TEST_PRECISION = 8192

PI_50 = "3.1415926535897932384626433832795028841971693993751"


@pytest.fixture
def precision() -> int:
    return TEST_PRECISION
