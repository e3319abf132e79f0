"""
Sample data generator for the catalog importer.

Writes a small directory of legacy-format files (code page 437) with a
category hierarchy (`.lst`) and priced positions (`.pos`), including
umlauts, multi-line texts, meta tags and a stray backup file, so the
importer can be tried without the original software's data.
"""

from __future__ import annotations

import random
import sys
import uuid
from pathlib import Path
from typing import List

import typer

app = typer.Typer(help="Generate sample .lst/.pos files in code page 437.")

ENCODING = "cp437"

CATEGORY_NAMES = ["Dach", "Steildach", "Flachdach", "Fenster", "Dachrinnen", "Gerüst", "Zubehör"]
MATERIALS = ["Dachziegel", "Betondachstein", "Schiefer", "Bitumenbahn", "Zinkblech", "Lattung"]
UNITS = [("Stk", "01"), ("m²", "02"), ("lfm", "03"), ("Std", "04"), ("psch", "05")]


def _lst_lines(rng: random.Random) -> List[str]:
    lines: List[str] = []
    for index, name in enumerate(CATEGORY_NAMES):
        guid = str(uuid.UUID(int=rng.getrandbits(128)))
        lines.append(f"{index:03d}G = {guid}")
        lines.append(f"{index:03d}N = {name}")
        if index > 0:
            # two roots (Dach, Fenster); everything else hangs below one of them
            parent = 0 if index < 3 else 3
            if index != 3:
                lines.append(f"{index:03d}P = {parent:03d}")
        lines.append(f"{index:03d}E = 0")
    return lines


def _pos_lines(rng: random.Random, positions: int, category_guids: List[str]) -> List[str]:
    lines = ["@KMusterkatalog", "@V2.1", "@AStärke", "0,5 mm"]
    for number in range(1, positions + 1):
        material = rng.choice(MATERIALS)
        unit, unit_code = rng.choice(UNITS)
        lines.append(f"@P{material} {number:03d}")
        lines.append(f"{rng.uniform(1, 250):.2f}".replace(".", ","))
        if rng.random() < 0.5:
            lines.append(str(rng.randint(1, 20)))
        if rng.random() < 0.3:
            lines.append("@BHinweis: Ausführung nach Herstellervorgabe.")
            lines.append("Überstände sind gesondert zu vergüten.")
        lines.append(f"@R{material} verlegen")
        lines.append(f"@T{material} liefern und fachgerecht verlegen.")
        lines.append("Inklusive Befestigungsmaterial und Anschlüssen.")
        lines.append(f"Maße gemäß Aufmaß, Größe {rng.randint(10, 90)} cm.")
        lines.append(f"@M{unit}")
        lines.append(f"@E{unit_code}")
        lines.append(f"@C{rng.choice(category_guids)}")
        lines.append(f"@D{number:05d}")
        lines.append("@W0")
    return lines


def _write(path: Path, lines: List[str]) -> None:
    path.write_bytes(("\r\n".join(lines) + "\r\n").encode(ENCODING))


def generate_sample(output_dir: Path, positions: int = 20, seed: int = 42) -> List[Path]:
    """Write the sample files and return their paths."""
    rng = random.Random(seed)
    output_dir.mkdir(parents=True, exist_ok=True)

    lst_lines = _lst_lines(rng)
    guids = [line.split("=", 1)[1].strip() for line in lst_lines if line[3] == "G"]

    written = [
        output_dir / "DACH.LST",
        output_dir / "DACH.POS",
        output_dir / "DACH.bak.POS",
    ]
    _write(written[0], lst_lines)
    _write(written[1], _pos_lines(rng, positions, guids))
    _write(written[2], _pos_lines(rng, 2, guids))
    return written


@app.command()
def main(
    output: Path = typer.Option(
        Path("Posten"),
        "--output",
        "-o",
        help="Directory to write the sample files to.",
    ),
    positions: int = typer.Option(
        20,
        "--positions",
        "-p",
        help="Number of positions in the .pos file.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
) -> None:
    """
    Generate a sample source directory for the importer.
    """
    for path in generate_sample(output, positions=positions, seed=seed):
        typer.echo(f"Wrote {path}")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
