import json

from engine.session import (
    JsonFileStorage,
    MemoryStorage,
    SessionStore,
    KEY_AUTO_POSITIONING,
    KEY_CACHE_DIRECTORY,
    KEY_PLAYER_COINS,
    KEY_PLAYER_LAT,
    KEY_PLAYER_LNG,
)
from world.board import LatLng
from world.directory import CacheDirectory
from world.geocache import Coin, serialize_coins

ORIGIN = LatLng(36.98949379578401, -122.06277128548504)

def test_load_with_no_prior_storage_returns_defaults():
    store = SessionStore(MemoryStorage(), ORIGIN)
    snapshot = store.load()

    assert len(snapshot.directory) == 0
    assert snapshot.position == ORIGIN
    assert snapshot.coins == []
    assert snapshot.auto_positioning is False

def test_save_and_load_round_trip():
    storage = MemoryStorage()
    store = SessionStore(storage, ORIGIN)

    directory = CacheDirectory()
    directory.set("1,2", serialize_coins([Coin(row=1, col=2, serial=0)]))
    directory.set("-3,4", serialize_coins([]))
    coins = [Coin(row=1, col=2, serial=1), Coin(row=-3, col=4, serial=0)]
    position = LatLng(36.9896, -122.0629)

    store.save(directory, position, coins, True)

    snapshot = SessionStore(storage, ORIGIN).load()
    assert snapshot.directory.items() == directory.items()
    assert snapshot.position == position
    assert snapshot.coins == coins
    assert snapshot.auto_positioning is True

def test_values_are_strings_under_fixed_keys():
    storage = MemoryStorage()
    SessionStore(storage, ORIGIN).save(CacheDirectory(), ORIGIN, [], False)

    assert set(storage.items) == {
        KEY_CACHE_DIRECTORY, KEY_PLAYER_LAT, KEY_PLAYER_LNG, KEY_PLAYER_COINS, KEY_AUTO_POSITIONING,
    }
    assert all(isinstance(v, str) for v in storage.items.values())
    assert storage.items[KEY_AUTO_POSITIONING] == "false"
    assert float(storage.items[KEY_PLAYER_LAT]) == ORIGIN.lat

def test_partial_storage_falls_back_per_key():
    storage = MemoryStorage({
        KEY_PLAYER_LAT: "37.0",
        KEY_PLAYER_COINS: serialize_coins([Coin(row=0, col=0, serial=2)]),
    })
    snapshot = SessionStore(storage, ORIGIN).load()

    # Half a position is no position
    assert snapshot.position == ORIGIN
    assert snapshot.coins == [Coin(row=0, col=0, serial=2)]
    assert len(snapshot.directory) == 0
    assert snapshot.auto_positioning is False

def test_malformed_values_do_not_crash_load():
    storage = MemoryStorage({
        KEY_CACHE_DIRECTORY: "{{{",
        KEY_PLAYER_LAT: "north",
        KEY_PLAYER_LNG: "-122.0",
        KEY_PLAYER_COINS: '{"version": 1, "coins": "lots"}',
        KEY_AUTO_POSITIONING: "maybe",
    })
    snapshot = SessionStore(storage, ORIGIN).load()

    assert len(snapshot.directory) == 0
    assert snapshot.position == ORIGIN
    assert snapshot.coins == []
    assert snapshot.auto_positioning is False

def test_non_finite_position_is_rejected():
    storage = MemoryStorage({KEY_PLAYER_LAT: "nan", KEY_PLAYER_LNG: "1.0"})
    assert SessionStore(storage, ORIGIN).load().position == ORIGIN

def test_directory_keeps_only_well_formed_pairs():
    storage = MemoryStorage({
        KEY_CACHE_DIRECTORY: json.dumps([
            ["1,1", "m1"], ["2,2"], "junk", [3, "m3"], ["north", "m5"], ["4,4", "m4"],
        ]),
    })
    snapshot = SessionStore(storage, ORIGIN).load()
    assert snapshot.directory.items() == [("1,1", "m1"), ("4,4", "m4")]

def test_reset_clears_everything():
    storage = MemoryStorage()
    store = SessionStore(storage, ORIGIN)
    directory = CacheDirectory({"1,1": "m1"})
    store.save(directory, LatLng(1.0, 1.0), [Coin(row=1, col=1, serial=0)], True)

    store.reset()
    snapshot = store.load()
    assert len(snapshot.directory) == 0
    assert snapshot.position == ORIGIN
    assert snapshot.coins == []
    assert snapshot.auto_positioning is False

def test_json_file_storage_persists_between_instances(tmp_path):
    path = tmp_path / "sessions" / "storage.json"
    storage = JsonFileStorage(path)
    storage.set_item("a", "1")
    storage.set_item("b", "two")

    reopened = JsonFileStorage(path)
    assert reopened.get_item("a") == "1"
    assert reopened.get_item("b") == "two"
    assert reopened.get_item("c") is None

    reopened.clear()
    assert JsonFileStorage(path).get_item("a") is None

def test_json_file_storage_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("this is not json", encoding="utf-8")

    storage = JsonFileStorage(path)
    assert storage.get_item("anything") is None

    storage.set_item("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

def test_session_store_over_file_storage(tmp_path):
    path = tmp_path / "storage.json"
    coins = [Coin(row=7, col=-7, serial=3)]
    SessionStore(JsonFileStorage(path), ORIGIN).save(CacheDirectory(), LatLng(1.5, -2.5), coins, False)

    snapshot = SessionStore(JsonFileStorage(path), ORIGIN).load()
    assert snapshot.position == LatLng(1.5, -2.5)
    assert snapshot.coins == coins

def test_json_file_storage_treats_undecodable_bytes_as_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_bytes(b'{"geocoin.playerLat": "\xff\xfe"}')

    snapshot = SessionStore(JsonFileStorage(path), ORIGIN).load()
    assert snapshot.position == ORIGIN
    assert snapshot.coins == []

def test_json_file_storage_survives_runaway_nesting(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")

    storage = JsonFileStorage(path)
    assert storage.get_item(KEY_PLAYER_LAT) is None
    assert len(SessionStore(storage, ORIGIN).load().directory) == 0

def test_deeply_nested_directory_falls_back_to_empty():
    storage = MemoryStorage({
        KEY_CACHE_DIRECTORY: "[" * 100000 + "]" * 100000,
        KEY_PLAYER_COINS: "[" * 100000 + "]" * 100000,
    })
    snapshot = SessionStore(storage, ORIGIN).load()
    assert len(snapshot.directory) == 0
    assert snapshot.coins == []
