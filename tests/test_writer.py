"""Tests for the article output writer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fcv_news.config import OutputConfig
from fcv_news.core.types import Article
from fcv_news.output.writer import build_run_output_dir, output_path, write_articles


def _article(source_id: int = 1301) -> Article:
    return Article(
        title="Teste",
        summary="Resumo curto",
        body="Corpo de teste",
        published_at=1704114000,
        source_id=source_id,
        tags=["saude"],
        images=["https://fcv.org.br/img/a.jpg"],
    )


def test_write_articles_json_uses_record_keys(tmp_path: Path) -> None:
    path = write_articles([_article()], tmp_path / "nested" / "noticias.json", "json")

    records = json.loads(path.read_text(encoding="utf-8"))

    assert records == [
        {
            "titulo": "Teste",
            "resumo": "Resumo curto",
            "conteudo": "Corpo de teste",
            "data_publicacao": 1704114000,
            "local_id": 1301,
            "tags": ["saude"],
            "imagens": ["https://fcv.org.br/img/a.jpg"],
        }
    ]


def test_write_articles_jsonl_writes_one_record_per_line(tmp_path: Path) -> None:
    path = write_articles([_article(1), _article(2)], tmp_path / "noticias.jsonl", "jsonl")

    lines = path.read_text(encoding="utf-8").splitlines()

    assert [json.loads(line)["local_id"] for line in lines] == [1, 2]


def test_write_articles_keeps_accents(tmp_path: Path) -> None:
    article = _article()
    article.title = "Prevenção"

    path = write_articles([article], tmp_path / "noticias.json")

    assert "Prevenção" in path.read_text(encoding="utf-8")


def test_write_articles_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported output format"):
        write_articles([], tmp_path / "x.csv", "csv")


def test_output_path_follows_format(tmp_path: Path) -> None:
    assert output_path(tmp_path, OutputConfig(format="jsonl")) == tmp_path / "noticias.jsonl"
    with pytest.raises(ValueError):
        output_path(tmp_path, OutputConfig(format="xml"))


def test_build_run_output_dir_modes(tmp_path: Path) -> None:
    assert build_run_output_dir(tmp_path, OutputConfig(run_folder_mode="flat")) == tmp_path
    stamped = build_run_output_dir(tmp_path, OutputConfig(run_folder_mode="timestamp"))
    assert stamped.parent == tmp_path
    with pytest.raises(ValueError, match="run_folder_mode"):
        build_run_output_dir(tmp_path, OutputConfig(run_folder_mode="input"))
