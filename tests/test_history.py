from retinaview import HistoryEntry, HistoryStore


def test_empty_when_missing(history_store):
    assert history_store.list() == []


def test_newest_first_and_limited(history_store):
    for i in range(5):
        history_store.add(HistoryEntry(image_name=f"scan{i}.png"))

    names = [e.image_name for e in history_store.list()]
    assert names == ["scan4.png", "scan3.png", "scan2.png"]


def test_round_trip_and_get(history_store):
    entry = history_store.add(HistoryEntry(
        image_name="left.jpg", image_id="abc123", findings=["Dot hemorrhage noted"],
    ))
    loaded = history_store.get(entry.id)

    assert loaded == entry
    assert history_store.get("missing") is None


def test_re_adding_moves_to_front(history_store):
    a = history_store.add(HistoryEntry(image_name="a"))
    history_store.add(HistoryEntry(image_name="b"))
    history_store.add(a)
    assert [e.image_name for e in history_store.list()] == ["a", "b"]


def test_corrupt_file_reads_empty(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")
    assert HistoryStore(str(path)).list() == []


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "history.json"
    path.write_text('[{"image_name": "x", "id": "AAA", "thumbnail": "..."}]', encoding="utf-8")
    assert HistoryStore(str(path)).list()[0].id == "AAA"


def test_clear(history_store):
    history_store.add(HistoryEntry(image_name="a"))
    history_store.clear()
    assert history_store.list() == []


def test_creates_parent_directory(tmp_path):
    store = HistoryStore(str(tmp_path / "nested" / "dir" / "history.json"))
    store.add(HistoryEntry(image_name="a"))
    assert len(store.list()) == 1
