import pytest
import sys
from pathlib import Path

# Add src/ directory to path for the phismodel package
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.is_dir():
    sys.path.insert(0, str(SRC))

# Skip all tests when required dependencies are missing
_required = ["numpy", "scipy", "pandas", "yaml", "jsonschema"]
for pkg in _required:
    pytest.importorskip(pkg, reason=f"Package '{pkg}' is required for tests")

from phismodel.efficiency import CubicSpline
from phismodel.signal import ModelParameters, TimeResolution

# Central values close to the LHCb Run 1 measurement
NOMINAL = {
    "A_02": 0.52,
    "A_perp2": 0.25,
    "A_S2": 0.03,
    "DeltaGamma_sd": -0.0044,
    "DeltaGamma": 0.0805,
    "DeltaM": 17.7,
    "phi_0": -0.04,
    "phi_par0": 0.0,
    "phi_perp0": 0.0,
    "phi_S0": 0.0,
    "lambda_0": 1.0,
    "lambda_par0": 1.0,
    "lambda_perp0": 1.0,
    "lambda_S0": 1.0,
    "delta_par0": 3.26,
    "delta_perp0": 3.08,
    "delta_Sperp": -0.26,
}


@pytest.fixture
def nominal_parameters():
    return ModelParameters.from_mapping(NOMINAL)


@pytest.fixture
def resolution():
    return TimeResolution(mu=0.0, sigma=0.045)


@pytest.fixture
def efficiency_spline():
    return CubicSpline([0.3, 0.91, 1.96, 9.0], [0.6, 0.8, 1.0, 1.05, 1.0, 0.98])
