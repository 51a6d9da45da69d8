import numpy as np
import pytest

from phismodel.kinematics import FourMomentum, cos_decay_angle, phi_plane_angle

M_MU = 0.1056583745
M_K = 0.493677


def _random_event(rng, size):
    def particle(mass):
        p = rng.normal(0.0, 1.5, size=(3, size))
        p[2] += 20.0
        return FourMomentum.from_mass(mass, *p)

    return particle(M_MU), particle(M_MU), particle(M_K), particle(M_K)


def test_four_momentum_arithmetic():
    p = FourMomentum(5.0, 1.0, 2.0, 3.0)
    q = FourMomentum(4.0, 0.5, -1.0, 1.0)
    s = p + q
    assert (s.e, s.px, s.py, s.pz) == (9.0, 1.5, 1.0, 4.0)
    d = p - q
    assert (d.e, d.px, d.py, d.pz) == (1.0, 0.5, 3.0, 2.0)
    assert p * q == pytest.approx(5.0 * 4.0 - (0.5 - 2.0 + 3.0))
    assert (2.0 * p).e == 10.0
    assert (p / 2.0).pz == 1.5
    assert p.mass2() == pytest.approx(25.0 - 14.0)
    c = p.cross(q)
    assert (c.px, c.py, c.pz) == (2.0 * 1.0 - 3.0 * -1.0, 3.0 * 0.5 - 1.0 * 1.0, 1.0 * -1.0 - 2.0 * 0.5)


def test_boost_to_rest_frame_gives_mass_at_rest():
    p = FourMomentum.from_mass(5.36688, 1.0, -2.0, 30.0)
    rest = p.boost_to_rest_frame(p)
    assert rest.e == pytest.approx(5.36688, rel=1e-12)
    for comp in (rest.px, rest.py, rest.pz):
        assert comp == pytest.approx(0.0, abs=1e-10)


def test_boost_by_frame_at_rest_is_identity():
    frame = FourMomentum(3.0, 0.0, 0.0, 0.0)
    p = FourMomentum(2.0, 0.3, 0.4, 1.0)
    boosted = p.boost_to_rest_frame(frame)
    assert (boosted.e, boosted.px, boosted.py, boosted.pz) == pytest.approx((2.0, 0.3, 0.4, 1.0))


def test_boost_preserves_invariant_mass():
    rng = np.random.default_rng(1)
    mu_p, mu_m, k_p, k_m = _random_event(rng, 50)
    frame = mu_p + mu_m + k_p + k_m
    boosted = k_p.boost_to_rest_frame(frame)
    np.testing.assert_allclose(boosted.mass(), M_K, rtol=1e-8)


def test_cos_decay_angle_matches_explicit_boost():
    rng = np.random.default_rng(7)
    mu_p, mu_m, k_p, k_m = _random_event(rng, 200)
    jpsi = mu_p + mu_m
    bs = jpsi + k_p + k_m

    cos_l = cos_decay_angle(bs, jpsi, mu_p)

    # angle between mu+ and the direction opposite to B_s, both in the J/psi frame
    mu_rest = mu_p.boost_to_rest_frame(jpsi)
    bs_rest = bs.boost_to_rest_frame(jpsi)
    explicit = -mu_rest.dot(bs_rest) / (mu_rest.p3mag() * bs_rest.p3mag())

    np.testing.assert_allclose(cos_l, explicit, rtol=1e-6, atol=1e-8)
    assert np.all(np.abs(cos_l) <= 1.0 + 1e-9)


def test_phi_range_on_random_events():
    rng = np.random.default_rng(3)
    mu_p, mu_m, k_p, k_m = _random_event(rng, 1000)
    phi = phi_plane_angle(k_m, k_p, mu_p, mu_m)
    assert phi.shape == (1000,)
    assert np.all(phi >= 0.0)
    assert np.all(phi < 2.0 * np.pi)


@pytest.mark.parametrize("azimuth", [0.3, 1.0, 2.5, 4.0, 5.9])
def test_phi_known_configuration(azimuth):
    # mother at rest, (d2, d3) system along +z with d2 in the x-z plane
    d2 = FourMomentum.from_mass(M_K, 0.3, 0.0, 1.0)
    d3 = FourMomentum.from_mass(M_K, -0.3, 0.0, 1.0)
    px, py = 0.4 * np.cos(azimuth), 0.4 * np.sin(azimuth)
    h1 = FourMomentum.from_mass(M_MU, px, py, -1.0)
    h2 = FourMomentum.from_mass(M_MU, -px, -py, -1.0)

    phi = phi_plane_angle(d2, d3, h1, h2)
    assert float(phi) == pytest.approx(2.0 * np.pi - azimuth, rel=1e-10)


def test_degenerate_plane_gives_nan():
    d2 = FourMomentum.from_mass(M_K, 0.0, 0.0, 1.0)
    d3 = FourMomentum.from_mass(M_K, 0.0, 0.0, 0.5)
    h1 = FourMomentum.from_mass(M_MU, 0.2, 0.1, -0.8)
    h2 = FourMomentum.from_mass(M_MU, -0.2, -0.1, -0.7)
    assert np.isnan(phi_plane_angle(d2, d3, h1, h2))
