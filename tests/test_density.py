import logging

import numpy as np
import pytest
from scipy import integrate

from phismodel.signal import (
    AngularBasis,
    CPState,
    SignalDensity,
    derive_coefficients,
)

LOWER, UPPER = 0.3, 5.0


def _random_points(n, seed=11):
    rng = np.random.default_rng(seed)
    t = rng.uniform(LOWER, UPPER, n)
    ch = rng.uniform(-1.0, 1.0, n)
    cl = rng.uniform(-1.0, 1.0, n)
    phi = rng.uniform(0.0, 2.0 * np.pi, n)
    return t, ch, cl, phi


def _angular_grid(n_cos=8, n_phi=16):
    """Gauss-Legendre nodes in the cosines, uniform nodes in phi."""
    x, w = np.polynomial.legendre.leggauss(n_cos)
    phi = np.arange(n_phi) * 2.0 * np.pi / n_phi
    ch, cl, ph = np.meshgrid(x, x, phi, indexing="ij")
    weights = np.einsum("i,j,k->ijk", w, w, np.full(n_phi, 2.0 * np.pi / n_phi))
    return ch.ravel(), cl.ravel(), ph.ravel(), weights.ravel()


@pytest.fixture(params=["ideal", "resolution", "efficiency"])
def density(request, resolution, efficiency_spline):
    if request.param == "ideal":
        return SignalDensity(CPState.PARTICLE)
    if request.param == "resolution":
        return SignalDensity(CPState.PARTICLE, resolution=resolution)
    return SignalDensity(CPState.PARTICLE, resolution=resolution, efficiency=efficiency_spline)


def _raw_density(dens, snap, t, ch, cl, phi):
    """Sum of N_k F_k h_k(t) without the negative floor."""
    F = np.asarray(dens.basis.evaluate(ch, cl, phi))
    h = dens.time_factors(snap, t)
    h = h.reshape(h.shape + (1,) * (F.ndim - 1))
    return np.tensordot(snap.N, F * h, axes=1)


def _cp_violating_points(nominal_parameters, n, seed=17):
    rng = np.random.default_rng(seed)
    for _ in range(n):
        yield nominal_parameters.replace(
            A_02=rng.uniform(0.3, 0.6),
            A_perp2=rng.uniform(0.1, 0.3),
            A_S2=rng.uniform(0.0, 0.1),
            phi_0=rng.uniform(-np.pi, np.pi),
            phi_par0=rng.uniform(-np.pi, np.pi),
            phi_perp0=rng.uniform(-np.pi, np.pi),
            phi_S0=rng.uniform(-np.pi, np.pi),
            lambda_0=rng.uniform(0.6, 1.4),
            lambda_par0=rng.uniform(0.6, 1.4),
            lambda_perp0=rng.uniform(0.6, 1.4),
            lambda_S0=rng.uniform(0.6, 1.4),
            delta_par0=rng.uniform(-np.pi, np.pi),
            delta_perp0=rng.uniform(-np.pi, np.pi),
            delta_Sperp=rng.uniform(-np.pi, np.pi),
        )


def test_density_evaluate_finite(density, nominal_parameters):
    snap = derive_coefficients(nominal_parameters)
    values = density.evaluate(snap, *_random_points(2000))
    assert values.shape == (2000,)
    assert np.all(values >= 0.0)
    assert np.all(np.isfinite(values))


def test_unfloored_density_non_negative_nominal(nominal_parameters):
    ch, cl, phi = np.meshgrid(
        np.linspace(-1, 1, 21), np.linspace(-1, 1, 21), np.linspace(0, 2 * np.pi, 41),
        indexing="ij",
    )
    snap = derive_coefficients(nominal_parameters.replace(phi_0=0.0))
    dens = SignalDensity()
    for t in (0.0, 0.5, 1.0, 3.0):
        raw = _raw_density(dens, snap, t, ch.ravel(), cl.ravel(), phi.ravel())
        assert raw.min() >= -1e-12 * raw.max()


@pytest.mark.parametrize("cp", [CPState.PARTICLE, CPState.ANTIPARTICLE])
def test_unfloored_density_non_negative_with_cp_violation(cp, nominal_parameters):
    ch, cl, phi = np.meshgrid(
        np.linspace(-1, 1, 11), np.linspace(-1, 1, 11), np.linspace(0, 2 * np.pi, 25),
        indexing="ij",
    )
    ch, cl, phi = ch.ravel(), cl.ravel(), phi.ravel()
    dens = SignalDensity(cp)
    for params in _cp_violating_points(nominal_parameters, 30):
        snap = derive_coefficients(params)
        for t in (0.0, 0.37, 1.1, 2.7, 6.0):
            raw = _raw_density(dens, snap, t, ch, cl, phi)
            assert raw.min() >= -1e-12 * raw.max(), params.describe()


def test_interference_terms_bounded_by_squared_terms():
    # (f_ij / 2)**2 <= f_ii * f_jj for every interference pair
    ch, cl, phi = np.meshgrid(
        np.linspace(-1, 1, 31), np.linspace(-1, 1, 31), np.linspace(0, 2 * np.pi, 37),
        indexing="ij",
    )
    F = np.asarray(AngularBasis().evaluate(ch, cl, phi))
    pairs = {3: (2, 1), 4: (0, 1), 5: (0, 2), 7: (6, 1), 8: (6, 2), 9: (6, 0)}
    for k, (i, j) in pairs.items():
        assert np.all((0.5 * F[k]) ** 2 <= F[i] * F[j] + 1e-12), k


def test_density_zero_outside_simplex(density, nominal_parameters):
    snap = derive_coefficients(nominal_parameters.replace(A_02=0.6, A_perp2=0.5))
    values = density(snap, *_random_points(100))
    np.testing.assert_array_equal(values, 0.0)
    assert density.integrate(snap, LOWER, UPPER) == 0.0
    assert density.time_integral(snap, LOWER, UPPER, 0.1, 0.2, 1.0) == 0.0


def test_scalar_inputs_return_float(nominal_parameters):
    snap = derive_coefficients(nominal_parameters)
    value = SignalDensity().evaluate(snap, 1.0, 0.1, -0.3, 2.0)
    assert isinstance(value, float)
    assert value > 0.0


def test_scalar_time_with_array_angles(nominal_parameters):
    snap = derive_coefficients(nominal_parameters)
    dens = SignalDensity()
    _, ch, cl, phi = _random_points(5)
    together = dens(snap, 1.2, ch, cl, phi)
    single = [dens(snap, 1.2, a, b, c) for a, b, c in zip(ch, cl, phi)]
    np.testing.assert_allclose(together, single, rtol=1e-14)


def test_cp_conjugate_shares_even_terms(resolution, nominal_parameters):
    snap = derive_coefficients(nominal_parameters)
    t = np.linspace(LOWER, UPPER, 50)
    bs = SignalDensity(CPState.PARTICLE, resolution=resolution)
    bsbar = SignalDensity(CPState.ANTIPARTICLE, resolution=resolution)

    even_p, odd_p = bs.even_odd_time_factors(snap, t)
    even_m, odd_m = bsbar.even_odd_time_factors(snap, t)
    np.testing.assert_array_equal(even_p, even_m)
    np.testing.assert_array_equal(odd_p, odd_m)

    np.testing.assert_array_equal(bs.time_factors(snap, t), even_p + odd_p)
    np.testing.assert_array_equal(bsbar.time_factors(snap, t), even_p - odd_p)

    # the oscillation makes the two flavours differ
    assert not np.allclose(bs.time_factors(snap, t), bsbar.time_factors(snap, t))


def test_time_factors_shape(density, nominal_parameters):
    snap = derive_coefficients(nominal_parameters)
    t = np.linspace(LOWER, UPPER, 7)
    assert density.time_factors(snap, t).shape == (10, 7)
    assert density.integrated_time_factors(snap, LOWER, UPPER).shape == (10,)


@pytest.mark.parametrize("cp", [CPState.PARTICLE, CPState.ANTIPARTICLE])
@pytest.mark.parametrize("angles", [(0.1, -0.3, 2.0), (-0.7, 0.5, 4.4)])
def test_time_integral_matches_quadrature(
    cp, angles, resolution, efficiency_spline, nominal_parameters
):
    snap = derive_coefficients(nominal_parameters)
    for dens in (
        SignalDensity(cp),
        SignalDensity(cp, resolution=resolution),
        SignalDensity(cp, resolution=resolution, efficiency=efficiency_spline),
    ):
        expected, _ = integrate.quad(
            lambda t: dens.evaluate(snap, t, *angles),
            LOWER,
            UPPER,
            points=[0.91, 1.96],
            epsabs=0,
            epsrel=1e-11,
            limit=2000,
        )
        result = dens.time_integral(snap, LOWER, UPPER, *angles)
        assert result == pytest.approx(expected, rel=1e-7)


def test_angular_basis_integrals_match_quadrature():
    ch, cl, phi, w = _angular_grid()
    F = np.asarray(AngularBasis().evaluate(ch, cl, phi))
    numeric = F @ w
    np.testing.assert_allclose(numeric, AngularBasis().integrals(), rtol=1e-12, atol=1e-12)


def test_integrate_matches_angular_quadrature_of_time_integral(density, nominal_parameters):
    snap = derive_coefficients(nominal_parameters)
    ch, cl, phi, w = _angular_grid()
    numeric = np.sum(w * density.time_integral(snap, LOWER, UPPER, ch, cl, phi))
    assert density.integrate(snap, LOWER, UPPER) == pytest.approx(numeric, rel=1e-10)


def test_flavours_have_similar_normalisation(resolution, nominal_parameters):
    snap = derive_coefficients(nominal_parameters)
    n_p = SignalDensity(CPState.PARTICLE, resolution=resolution).integrate(snap, LOWER, UPPER)
    n_m = SignalDensity(CPState.ANTIPARTICLE, resolution=resolution).integrate(snap, LOWER, UPPER)
    assert n_p > 0 and n_m > 0
    assert n_p == pytest.approx(n_m, rel=1e-2)


def test_nan_density_is_logged_and_returned(caplog, nominal_parameters):
    # A_02 < 0 keeps A_par2 positive but makes the interference factors NaN
    snap = derive_coefficients(nominal_parameters.replace(A_02=-0.1))
    dens = SignalDensity()
    with caplog.at_level(logging.WARNING, logger="phismodel.signal.density"):
        value = dens.evaluate(snap, 1.0, 0.2, 0.3, 1.0)
    assert np.isnan(value)
    assert "NaN" in caplog.text
    assert "A_02=-0.1" in caplog.text


def test_efficiency_requires_resolution(efficiency_spline):
    with pytest.raises(ValueError):
        SignalDensity(efficiency=efficiency_spline)


def test_custom_angular_basis(nominal_parameters):
    class OnlyLongitudinal:
        def evaluate(self, cos_theta_h, cos_theta_l, phi):
            one = np.ones_like(np.asarray(phi, dtype=float))
            return (one,) + (0.0 * one,) * 9

        def integrals(self):
            return (4.0 * np.pi,) + (0.0,) * 9

    snap = derive_coefficients(nominal_parameters)
    dens = SignalDensity(basis=OnlyLongitudinal())
    h = dens.time_factors(snap, 1.0)
    assert dens(snap, 1.0, 0.0, 0.0, 0.0) == pytest.approx(snap.N[0] * h[0])
    H = dens.integrated_time_factors(snap, LOWER, UPPER)
    assert dens.integrate(snap, LOWER, UPPER) == pytest.approx(snap.N[0] * 4.0 * np.pi * H[0])
