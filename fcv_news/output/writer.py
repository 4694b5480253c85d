"""Output writers for assembled article records."""

from __future__ import annotations

from datetime import datetime
import json
from pathlib import Path

from ..config import OutputConfig
from ..core.types import Article


_EXTENSIONS = {"json": "json", "jsonl": "jsonl"}


def output_path(run_output_dir: Path, cfg: OutputConfig) -> Path:
    """Return the result file path for the configured format.

    Raises:
        ValueError: If the format is not supported
    """
    fmt = (cfg.format or "json").lower()
    if fmt not in _EXTENSIONS:
        raise ValueError("Unsupported output format. Use 'json' or 'jsonl'.")
    return run_output_dir / f"{cfg.filename}.{_EXTENSIONS[fmt]}"


def write_articles(articles: list[Article], path: Path, fmt: str = "json") -> Path:
    """Write article records to disk.

    Args:
        articles: Articles to write, in output order
        path: Destination file
        fmt: "json" for one indented array, "jsonl" for one record per line

    Returns:
        The path written

    Raises:
        ValueError: If the format is not supported
    """
    fmt = fmt.lower()
    if fmt not in _EXTENSIONS:
        raise ValueError("Unsupported output format. Use 'json' or 'jsonl'.")

    path.parent.mkdir(parents=True, exist_ok=True)
    records = [article.to_record() for article in articles]
    with open(path, "w", encoding="utf-8") as f:
        if fmt == "json":
            json.dump(records, f, indent=2, ensure_ascii=False)
            f.write("\n")
        else:
            for record in records:
                f.write(json.dumps(record, ensure_ascii=False))
                f.write("\n")
    return path


def build_run_output_dir(output_dir: Path, cfg: OutputConfig) -> Path:
    """Build the output directory for this run based on configured mode.

    Raises:
        ValueError: If run_folder_mode is not supported
    """
    mode = (cfg.run_folder_mode or "flat").lower()
    if mode == "flat":
        return output_dir
    if mode == "timestamp":
        return output_dir / datetime.now().strftime("%Y%m%d-%H%M%S")
    raise ValueError("Unsupported run_folder_mode. Use 'flat' or 'timestamp'.")
