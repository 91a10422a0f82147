from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SET_SERIES_PATH = PROJECT_ROOT / "tools" / "set_series.py"


def _load_set_series_module():
    spec = importlib.util.spec_from_file_location("set_series", SET_SERIES_PATH)
    if spec is None or spec.loader is None:
        raise RuntimeError("Unable to load tools/set_series.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def set_series(monkeypatch, session_factory):
    module = _load_set_series_module()
    monkeypatch.setattr(module, "SessionLocal", session_factory)
    return module


def test_attach_and_clear(set_series, make_post, store, capsys):
    post = make_post("Post")

    assert set_series.main([post.id, "--title", "Rust Basics", "--position", "2"]) == 0
    assert "rust-basics" in capsys.readouterr().out
    row = store.select("post_series_items").eq("post_id", post.id).first()
    assert row["position"] == 2

    assert set_series.main([post.id, "--clear"]) == 0
    assert "not in a series" in capsys.readouterr().out
    assert store.select("post_series_items").eq("post_id", post.id).first() is None


def test_store_failure_exit_code(set_series, monkeypatch, capsys):
    def _fail(self, *args):
        raise set_series.StoreError("upsert on post_series_items failed", code="57014")

    monkeypatch.setattr(set_series.SeriesService, "upsert_series_membership", _fail)

    assert set_series.main(["some-post", "--title", "Rust Basics"]) == 1
    assert "Failed to update series" in capsys.readouterr().err


@pytest.mark.parametrize("title", ["!!!", "   "])
def test_unusable_title_fails_and_keeps_membership(
    set_series, make_post, store, capsys, title
):
    post = make_post("Post")
    assert set_series.main([post.id, "--title", "Rust Basics"]) == 0
    capsys.readouterr()

    assert set_series.main([post.id, "--title", title]) == 1

    captured = capsys.readouterr()
    assert "Series unchanged" in captured.err
    assert "✅" not in captured.out
    row = store.select("post_series_items").eq("post_id", post.id).first()
    assert row["series_slug"] == "rust-basics"


def test_title_or_clear_required(set_series):
    with pytest.raises(SystemExit):
        set_series.main(["some-post"])
