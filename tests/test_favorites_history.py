import json
from pathlib import Path

from ghbrowser.services.favorites import favorite_repositories, favorite_users
from ghbrowser.services.history import SearchHistory
from ghbrowser.services.observable import Observable
from ghbrowser.services.storage import JsonFileStore, MirroredStore, ReloadMarker

from conftest import make_repo, make_user


def test_observable_replays_and_unsubscribes() -> None:
    box = Observable(1)
    seen = []
    unsubscribe = box.subscribe(seen.append)
    box.set(2)
    unsubscribe()
    box.set(3)
    assert seen == [1, 2]
    assert box.value == 3


# -- history ------------------------------------------------------------------


def test_history_dedupes_ignoring_case(tmp_path: Path) -> None:
    history = SearchHistory(JsonFileStore(tmp_path / "prefs.json"))
    history.add("swift")
    history.add("python")
    history.add("  Swift ")
    assert history.entries() == ["Swift", "python"]


def test_history_is_capped(tmp_path: Path) -> None:
    history = SearchHistory(JsonFileStore(tmp_path / "prefs.json"))
    for i in range(21):
        history.add(f"q{i}")
    entries = history.entries()
    assert len(entries) == 20
    assert entries[0] == "q20"
    assert "q0" not in entries


def test_history_rejects_blank_and_supports_remove_and_clear(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "prefs.json")
    history = SearchHistory(store)
    history.add("   ")
    assert history.entries() == []

    history.add("a")
    history.add("b")
    history.remove("A")
    assert history.entries() == ["b"]
    history.clear()
    assert history.entries() == []
    assert store.read("searchHistory") == []


def test_history_survives_restart(tmp_path: Path) -> None:
    SearchHistory(JsonFileStore(tmp_path / "prefs.json")).add("octo")
    assert SearchHistory(JsonFileStore(tmp_path / "prefs.json")).entries() == ["octo"]


# -- favorites ----------------------------------------------------------------


def test_favorites_are_unique_and_ordered(tmp_path: Path) -> None:
    favorites = favorite_users(JsonFileStore(tmp_path / "prefs.json"))
    changes = []
    favorites.favorites.subscribe(lambda items: changes.append([u.id for u in items]), emit_current=False)

    favorites.add(make_user(1))
    favorites.add(make_user(2))
    favorites.add(make_user(1, name="renamed"))
    favorites.remove(make_user(3))

    assert [u.id for u in favorites.all()] == [1, 2]
    assert changes == [[1], [1, 2]]
    assert favorites.is_favorite(make_user(2))

    favorites.remove_id(1)
    assert [u.id for u in favorites.all()] == [2]


def test_favorites_persist_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    favorite_repositories(JsonFileStore(path)).add(make_repo(7, "linux", stargazers_count=5))

    reloaded = favorite_repositories(JsonFileStore(path)).all()
    assert [r.name for r in reloaded] == ["linux"]
    assert reloaded[0].stars == 5

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["favoriteRepositories"][0]["stargazers_count"] == 5


def test_unreadable_favorites_start_empty(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "prefs.json")
    store.write("favoriteUsers", [{"id": "not-a-number"}])
    assert favorite_users(store).all() == []


def test_corrupt_store_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.read("searchHistory") is None
    store.write("searchHistory", ["x"])
    assert store.read("searchHistory") == ["x"]


# -- shared mirror ------------------------------------------------------------


def test_mirrored_favorites_write_both_stores_and_signal(tmp_path: Path) -> None:
    private = JsonFileStore(tmp_path / "data" / "prefs.json")
    shared = JsonFileStore(tmp_path / "shared" / "shared.json")
    marker = tmp_path / "shared" / "reload.json"
    favorites = favorite_users(MirroredStore(private, shared, notify=ReloadMarker(marker)))

    favorites.add(make_user(1, "octocat"))

    assert private.read("favoriteUsers")[0]["login"] == "octocat"
    assert shared.read("favoriteUsers")[0]["login"] == "octocat"
    assert json.loads(marker.read_text(encoding="utf-8"))["key"] == "favoriteUsers"


def test_mirrored_store_prefers_shared_copy(tmp_path: Path) -> None:
    private = JsonFileStore(tmp_path / "prefs.json")
    shared = JsonFileStore(tmp_path / "shared.json")
    private.write("favoriteUsers", [make_user(1).model_dump(mode="json", by_alias=True)])
    mirrored = MirroredStore(private, shared)
    assert [u.id for u in favorite_users(mirrored).all()] == [1]

    shared.write("favoriteUsers", [make_user(2).model_dump(mode="json", by_alias=True)])
    assert [u.id for u in favorite_users(mirrored).all()] == [2]


def test_failed_signal_does_not_undo_the_write(tmp_path: Path) -> None:
    def broken(key: str) -> None:
        raise RuntimeError("widget gone")

    private = JsonFileStore(tmp_path / "prefs.json")
    shared = JsonFileStore(tmp_path / "shared.json")
    favorites = favorite_users(MirroredStore(private, shared, notify=broken))
    favorites.add(make_user(1))

    assert [u.id for u in favorites.all()] == [1]
    assert shared.read("favoriteUsers") is not None


class ReadOnlyStore:
    def read(self, key: str):
        return None

    def write(self, key: str, value) -> None:
        raise PermissionError("shared container is read-only")


def test_unwritable_shared_store_keeps_private_write(tmp_path: Path) -> None:
    signals = []
    private = JsonFileStore(tmp_path / "prefs.json")
    favorites = favorite_users(MirroredStore(private, ReadOnlyStore(), notify=signals.append))

    favorites.add(make_user(1))

    assert [u.id for u in favorites.favorites.value] == [1]
    assert len(private.read("favoriteUsers")) == 1
    assert signals == []
