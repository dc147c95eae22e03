import pytest

from skillsynth.infrastructure.data import InMemoryStore, JsonFileStore


def test_memory_store_round_trip():
    store = InMemoryStore()
    store.set("skillsynth_user", {"name": "Asha", "scores": {"communication": 70}})

    assert store.get("skillsynth_user") == {"name": "Asha", "scores": {"communication": 70}}
    assert store.keys() == ["skillsynth_user"]

    store.delete("skillsynth_user")
    store.delete("skillsynth_user")
    assert store.get("skillsynth_user") is None


def test_memory_store_copies_values():
    store = InMemoryStore()
    value = {"badges": []}
    store.set("k", value)
    value["badges"].append("Early Bird")
    assert store.get("k") == {"badges": []}


def test_file_store_persists_across_instances(tmp_path):
    JsonFileStore(str(tmp_path)).set("skillsynth_user", {"name": "Kabir"})

    reopened = JsonFileStore(str(tmp_path))
    assert reopened.get("skillsynth_user") == {"name": "Kabir"}
    assert (tmp_path / "skillsynth_user.json").exists()
    assert not (tmp_path / "skillsynth_user.json.tmp").exists()


def test_file_store_delete(tmp_path):
    store = JsonFileStore(str(tmp_path))
    store.set("a", [1, 2])
    store.delete("a")
    store.delete("a")
    assert store.get("a") is None


def test_file_store_corrupt_file_reads_as_missing(tmp_path):
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    assert JsonFileStore(str(tmp_path)).get("broken") is None


def test_file_store_rejects_path_like_keys(tmp_path):
    store = JsonFileStore(str(tmp_path))
    with pytest.raises(ValueError):
        store.set("../escape", {})
    with pytest.raises(ValueError):
        store.get("")
