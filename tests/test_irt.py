from __future__ import annotations

import math

import pytest

from tryout_core import irt
from tryout_core.errors import NonConvergent, NumericGuard


def _pattern(n_correct: int, n: int = 10, a: float = 1.0, b: float = 0.0, c: float = 0.25):
    return [(1 if i < n_correct else 0, a, b, c) for i in range(n)]


def test_p_3pl_respects_guessing_floor():
    assert irt.p_3pl(0.0, 1.0, 0.0, 0.0) == pytest.approx(0.5)
    assert irt.p_3pl(-40.0, 1.0, 0.0, 0.25) == pytest.approx(0.25)
    for theta in (-4, -2, 0, 2, 4):
        p = irt.p_3pl(theta, 1.3, 0.5, 0.2)
        assert 0.2 <= p < 1.0


def test_item_info_matches_2pl_when_no_guessing():
    assert irt.item_info(0.0, 1.0, 0.0, 0.0) == pytest.approx(0.25, abs=1e-6)
    # guessing costs information at the same point
    assert irt.item_info(0.0, 1.0, 0.0, 0.25) == pytest.approx(0.15, abs=1e-6)


def test_gradient_sign_follows_pattern():
    assert irt.gradient(0.0, _pattern(10)) > 0
    assert irt.gradient(0.0, _pattern(0)) < 0


def test_estimate_matches_closed_form_for_identical_items():
    est = irt.estimate_theta(_pattern(8))
    # identical items: the MLE solves P(theta) = 0.8
    expected = math.log((0.8 - 0.25) / 0.75 / (1 - (0.8 - 0.25) / 0.75))
    assert est.theta == pytest.approx(expected, abs=0.01)
    assert est.standard_error == pytest.approx(0.862, abs=0.01)
    assert est.converged
    assert est.iterations <= 25


def test_perfect_and_zero_patterns_saturate():
    top = irt.estimate_theta(_pattern(10), theta_min=-4.0, theta_max=4.0)
    bottom = irt.estimate_theta(_pattern(0), theta_min=-4.0, theta_max=4.0)
    assert top.theta == 4.0
    assert bottom.theta == -4.0
    assert math.isfinite(top.standard_error) and top.standard_error > 1.0
    assert math.isfinite(bottom.standard_error) and bottom.standard_error > 2.0


def test_iteration_cap_raises_non_convergent():
    with pytest.raises(NonConvergent) as exc:
        irt.estimate_theta(_pattern(8), max_iterations=1)
    assert exc.value.iterations == 1
    assert exc.value.theta is not None


def test_empty_pattern_is_numeric_guard():
    with pytest.raises(NumericGuard):
        irt.estimate_theta([])


def test_se_from_info_never_divides_by_zero():
    assert math.isfinite(irt.se_from_info(0.0))
    assert irt.se_from_info(4.0) == pytest.approx(0.5)


def test_steep_items_far_from_start_converge():
    pattern = _pattern(2, n=5, a=2.0, b=1.5, c=0.0)
    est = irt.estimate_theta(pattern)

    assert est.converged
    assert est.theta == pytest.approx(1.5 + math.log(0.4 / 0.6) / 2.0, abs=0.005)
    # the path never bounces out to a bound
    assert all(-4.0 < t < 4.0 for t in est.history)


@pytest.mark.parametrize("b", [-3.0, -1.5, 1.5, 3.0])
@pytest.mark.parametrize("a", [0.3, 2.0, 3.0])
def test_log_likelihood_never_falls_along_the_path(a, b):
    pattern = _pattern(3, n=6, a=a, b=b, c=0.2)
    est = irt.estimate_theta(pattern)
    lls = [irt.log_likelihood(t, pattern) for t in est.history]

    assert est.converged
    for before, after in zip(lls, lls[1:]):
        assert after >= before - 1e-12


def test_se_band_brackets_the_reliable_region():
    pattern = _pattern(1)
    lo, hi = irt.se_band(pattern, -4.0, se_ceiling=2.0, theta_min=-4.0, theta_max=4.0)

    assert lo == -4.0
    assert -2.1 < hi < -2.0
    assert irt.se_from_info(irt.total_info(hi, pattern)) <= 2.0
    assert irt.se_from_info(irt.total_info(hi - 0.01, pattern)) > 2.0


def test_se_band_without_reliable_ability_spans_the_range():
    pattern = _pattern(2, n=5, a=0.3, b=0.0, c=0.0)
    assert irt.se_band(pattern, 0.5, se_ceiling=2.0) == (-4.0, 4.0)
