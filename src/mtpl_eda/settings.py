from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import math
from ruamel.yaml import YAML

CONFIG_PATH = Path("config/eda.yaml")

INF = math.inf

# (kolumna źródłowa, punkty cięcia, czy domknąć najniższy przedział, kolumna wynikowa)
DEFAULT_BINS = [
    ("driver_age", [17, 22, 26, 42, 74, INF], False, "cat_driver_age"),
    ("car_age",    [0, 1, 4, 15, INF],        True,  "cat_car_age"),
    ("density",    [0, 40, 200, 500, 4500, INF], True, "cat_density"),
]

# (kolumna źródłowa, poziomy zwijane do "other", kolumna wynikowa)
DEFAULT_COLLAPSE = [
    ("power",  ["i", "k", "l", "m", "o", "n"], "agg_power"),
    ("power",  ["k", "l", "m", "o", "n"],      "agg_power_2"),
    ("region", ["R25", "R23", "R74"],          "agg_region"),
]

_KNOWN_KEYS = {"raw_dir", "processed_dir", "report_dir", "seed", "pairs_sample",
               "bins", "collapse", "exposure_cap", "outliers"}


@dataclass(frozen=True)
class BinRule:
    source: str
    cutpoints: tuple
    include_lowest: bool
    target: str


@dataclass(frozen=True)
class CollapseRule:
    source: str
    collapse: frozenset
    target: str


@dataclass(frozen=True)
class OutlierPolicy:
    enabled: bool = False
    max_claim_count: int = 4
    min_exposure: float = 0.02


@dataclass(frozen=True)
class RunParams:
    """Parametry jednego przebiegu (ścieżki, seed, reguły cech, polityki filtrowania)."""
    raw_dir: Path = Path("data/raw")
    processed_dir: Path = Path("data/processed")
    report_dir: Path = Path("data/interim/eda")
    seed: int = 42
    pairs_sample: int = 2000
    bins: tuple = field(default_factory=lambda: tuple(
        BinRule(s, tuple(c), lo, t) for s, c, lo, t in DEFAULT_BINS))
    collapse: tuple = field(default_factory=lambda: tuple(
        CollapseRule(s, frozenset(c), t) for s, c, t in DEFAULT_COLLAPSE))
    exposure_cap: float | None = None
    outliers: OutlierPolicy = OutlierPolicy()

    @property
    def capped_view(self) -> bool:
        return self.exposure_cap is not None or self.outliers.enabled


def _cut(v):
    # YAML nie zna nieskończoności w prosty sposób -> "inf"/".inf"
    if isinstance(v, str) and v.strip().lower() in ("inf", ".inf", "+inf"):
        return INF
    return float(v)


def _rule(entry, need, section: str) -> dict:
    if not isinstance(entry, dict):
        raise SystemExit(f"Wpis w sekcji {section} musi być słownikiem: {entry!r}")
    miss = [k for k in need if k not in entry]
    if miss:
        raise SystemExit(f"Brakuje kluczy {miss} we wpisie sekcji {section}: {entry}")
    return entry


def params_from_dict(cfg: dict) -> RunParams:
    unknown = sorted(set(cfg) - _KNOWN_KEYS)
    if unknown:
        raise SystemExit(f"Nieznane klucze w konfiguracji: {unknown}")

    kw = {}
    for key in ("raw_dir", "processed_dir", "report_dir"):
        if key in cfg:
            kw[key] = Path(cfg[key])
    if "seed" in cfg:
        kw["seed"] = int(cfg["seed"])
    if "pairs_sample" in cfg:
        kw["pairs_sample"] = int(cfg["pairs_sample"])
    if "bins" in cfg:
        kw["bins"] = tuple(
            BinRule(b["source"], tuple(_cut(c) for c in b["cutpoints"]),
                    bool(b.get("include_lowest", False)), b["target"])
            for b in (_rule(e, ("source", "cutpoints", "target"), "bins") for e in cfg["bins"])
        )
    if "collapse" in cfg:
        kw["collapse"] = tuple(
            CollapseRule(c["source"], frozenset(str(v) for v in c["levels"]), c["target"])
            for c in (_rule(e, ("source", "levels", "target"), "collapse") for e in cfg["collapse"])
        )
    if cfg.get("exposure_cap") is not None:
        kw["exposure_cap"] = float(cfg["exposure_cap"])
    if "outliers" in cfg and cfg["outliers"]:
        o = cfg["outliers"]
        kw["outliers"] = OutlierPolicy(
            enabled=bool(o.get("enabled", False)),
            max_claim_count=int(o.get("max_claim_count", 4)),
            min_exposure=float(o.get("min_exposure", 0.02)),
        )
    return RunParams(**kw)


def load_params(path: Path = CONFIG_PATH) -> RunParams:
    if not path.exists():
        print(f"[INFO] Brak {path}, używam ustawień domyślnych")
        return RunParams()
    yaml = YAML(typ="safe")
    cfg = yaml.load(path.read_text(encoding="utf-8")) or {}
    return params_from_dict(cfg)
