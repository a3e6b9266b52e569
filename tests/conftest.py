import pandas as pd
import pytest

from mtpl_eda.settings import RunParams


@pytest.fixture
def raw_policy():
    # nazwy kolumn jak w freMTPLfreq.csv
    return pd.DataFrame({
        "PolicyID": [1, 2, 3, 4, 5, 6],
        "ClaimNb": [0, 1, 2, 0, 1, 0],
        "Exposure": [0.5, 1.0, 0.75, 1.2, 0.09, 0.3],
        "Power": ["d", "i", "k", "j", "o", "e"],
        "CarAge": [0, 3, 15, 1, 20, 7],
        "DriverAge": [18, 22, 45, 74, 30, 80],
        "Brand": ["Renault, Nissan or Citroen", "Volkswagen, Audi, Skoda or Seat",
                  "Opel, General Motors or Ford", "Fiat", "Japanese (except Nissan) or Korean",
                  "Mercedes, Chrysler or BMW"],
        "Gas": ["Regular", "Diesel", "Diesel", "Regular", "Regular", "Diesel"],
        "Region": ["R11", "R25", "R24", "R74", "R82", "R23"],
        "Density": [0, 40, 4500, 76, 27000, 501],
    })


@pytest.fixture
def raw_claims():
    # nazwy kolumn jak w freMTPLsev.csv
    return pd.DataFrame({
        "PolicyID": [2, 3, 3, 5],
        "ClaimAmount": [1000.5, 250.25, 749.75, 12000.0],
    })


@pytest.fixture
def raw_dir(tmp_path, raw_policy, raw_claims):
    d = tmp_path / "raw"
    d.mkdir()
    raw_policy.to_csv(d / "freMTPLfreq.csv", index=False)
    raw_claims.to_csv(d / "freMTPLsev.csv", index=False)
    return d


@pytest.fixture
def params(tmp_path, raw_dir):
    return RunParams(
        raw_dir=raw_dir,
        processed_dir=tmp_path / "processed",
        report_dir=tmp_path / "eda",
        pairs_sample=50,
    )
