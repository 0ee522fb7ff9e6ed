from __future__ import annotations

import pytest

from rooms.codes import CodeGenerator
from rooms.exceptions import CodeSpaceExhausted
from tests.conftest import FixedRandom


def test_default_codes_are_four_digits():
    gen = CodeGenerator()
    for _ in range(200):
        code = gen.generate(set())
        assert len(code) == 4
        assert code.isdigit()
        assert 1000 <= int(code) <= 9999


def test_retries_on_collision():
    gen = CodeGenerator(rng=FixedRandom(4821, 4821, 1234))
    assert gen.generate({"4821"}) == "1234"


def test_falls_back_to_free_codes_when_draws_keep_colliding():
    gen = CodeGenerator(digits=1, rng=FixedRandom(5))
    taken = {str(n) for n in range(1, 10)} - {"7"}
    assert gen.generate(taken) == "7"


def test_exhausted_code_space_raises():
    gen = CodeGenerator(digits=1)
    with pytest.raises(CodeSpaceExhausted):
        gen.generate({str(n) for n in range(1, 10)})


def test_rejects_zero_width():
    with pytest.raises(ValueError):
        CodeGenerator(digits=0)
