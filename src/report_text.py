"""Generate analysis text for the population sweep."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pandas as pd


def format_value(value: float) -> str:
    return f"{value:.2f}"


def build_paragraphs(
    mva: pd.DataFrame, stations: pd.DataFrame, validation: Optional[pd.DataFrame] = None
) -> List[str]:
    mva = mva.sort_values("n").reset_index(drop=True)
    first = mva.iloc[0]
    last = mva.iloc[-1]
    knee = float(first["knee"])
    bottleneck = int(first["bottleneck"])
    bottleneck_row = stations[stations["station"] == bottleneck].iloc[0]
    saturation = float(last["throughput"] / last["throughput_upper"]) if last["throughput_upper"] else 0.0

    p1 = (
        f"Al incrementar N de {int(first['n'])} a {int(last['n'])}, el throughput pasa de "
        f"{format_value(first['throughput'])} a {format_value(last['throughput'])} y el tiempo de "
        f"respuesta del sistema de {format_value(first['system_response'])} a "
        f"{format_value(last['system_response'])}. Con N={int(last['n'])} el throughput alcanza el "
        f"{format_value(saturation * 100)}% de su cota asintotica."
    )

    knee_text = format_value(knee) if knee != float("inf") else "infinito"
    p2 = (
        f"La estacion cuello de botella es la {bottleneck} (demanda "
        f"{format_value(bottleneck_row['demand'])}, utilizacion "
        f"{format_value(bottleneck_row['utilization'] * 100)}% y "
        f"{format_value(bottleneck_row['queue_length'])} trabajos en promedio con N maximo). "
        f"El punto de saturacion N* es {knee_text}: por encima de esa poblacion agregar trabajos "
        f"solo aumenta el tiempo de respuesta."
    )
    paragraphs = [p1, p2]

    if validation is not None and not validation.empty:
        err_x = float(validation["throughput_rel_err"].max())
        err_r = float(validation["system_response_rel_err"].max())
        little = float(validation["little_error_mean"].max())
        paragraphs.append(
            f"La concordancia MVA-simulacion es solida: los errores relativos maximos en "
            f"throughput y tiempo de respuesta son {format_value(err_x * 100)}% y "
            f"{format_value(err_r * 100)}%, y la desviacion de la Ley de Little no supera "
            f"{format_value(little * 100)}%."
        )
    return paragraphs


def main() -> None:
    mva_path = Path("outputs/sweep_mva.csv")
    stations_path = Path("outputs/sweep_stations.csv")
    validation_path = Path("outputs/sweep_validation.csv")
    for path in (mva_path, stations_path):
        if not path.exists():
            raise SystemExit(f"Resumen no encontrado: {path}")

    mva = pd.read_csv(mva_path)
    if mva.empty:
        raise SystemExit("El archivo sweep_mva.csv esta vacio.")
    stations = pd.read_csv(stations_path)
    validation = pd.read_csv(validation_path) if validation_path.exists() else None

    analysis_dir = Path("reports/analysis")
    analysis_dir.mkdir(parents=True, exist_ok=True)
    conclusions_path = analysis_dir / "conclusions.md"
    conclusions_path.write_text("\n\n".join(build_paragraphs(mva, stations, validation)), encoding="utf-8")
    print(f"Conclusiones guardadas en {conclusions_path.resolve()}")


if __name__ == "__main__":
    main()
