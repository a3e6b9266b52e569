from __future__ import annotations
from pathlib import Path
from urllib.parse import urlparse
import requests
from ruamel.yaml import YAML

CONFIG = Path("config/datasources.yaml")
EXPECTED = ("freMTPLfreq.csv", "freMTPLsev.csv")


def read_urls(config_path: Path = CONFIG) -> list[str]:
    yaml = YAML(typ="safe")
    cfg = yaml.load(config_path.read_text(encoding="utf-8")) or {}
    return list(cfg.get("urls") or [])


def download(urls, out_dir: Path, timeout: int = 60) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    saved = []
    for url in urls:
        name = Path(urlparse(url).path).name or "download"
        out_path = out_dir / name
        if out_path.exists():
            print(f"[SKIP] {name} już jest")
            saved.append(out_path)
            continue
        print(f"[GET ] {url}")
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
        out_path.write_bytes(r.content)
        print(f"[OK  ] zapisano -> {out_path}")
        saved.append(out_path)
    return saved


def main():
    out_dir = Path("data/raw")
    urls = read_urls()
    if not urls:
        print(f"Brak linków w {CONFIG} (sekcja 'urls').")
        return

    saved = download(urls, out_dir)
    missing = [n for n in EXPECTED if not (out_dir / n).exists()]
    if missing:
        print(f"[WARN] Po pobraniu wciąż brakuje: {missing} (sprawdź nazwy plików w linkach)")
    print(f"Gotowe ({len(saved)} plików).")


if __name__ == "__main__":
    main()
