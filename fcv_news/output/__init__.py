"""Output file generation."""

from .writer import build_run_output_dir, output_path, write_articles

__all__ = ["build_run_output_dir", "output_path", "write_articles"]
