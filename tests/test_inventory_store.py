"""Tests for InventoryStore."""

import pytest
from unittest.mock import patch

from gits.domain import RepositoryIdentity
from gits.exit_codes import ConfigError, InventoryIOError
from gits.infra.inventory_store import InventoryStore

HOST = "gitlab.example.com"


@pytest.fixture
def store(tmp_path):
    return InventoryStore(tmp_path)


class TestInventoryStoreMerge:
    """Tests for merging into inventory files."""

    def test_merge_creates_file(self, store):
        store.merge(HOST, "squad/tools", "mytool")

        assert store.path_for(HOST).exists()
        assert store.load(HOST).groups == {"squad/tools": ("mytool",)}

    def test_merge_is_idempotent(self, store):
        """Merging the same entry again leaves the file byte-identical."""
        store.merge(HOST, "squad", "app")
        first = store.path_for(HOST).read_bytes()

        for _ in range(3):
            store.merge(HOST, "squad", "app")

        assert store.path_for(HOST).read_bytes() == first

    def test_merge_preserves_unrelated_entries(self, store):
        store.merge(HOST, "g1", "a")
        store.merge(HOST, "g2", "b")
        store.merge(HOST, "g1", "c")

        assert store.load(HOST).groups == {"g1": ("a", "c"), "g2": ("b",)}

    def test_merge_keeps_names_sorted(self, store):
        for name in ["zeta", "alpha", "mid"]:
            store.merge(HOST, "g", name)

        assert store.load(HOST).groups["g"] == ("alpha", "mid", "zeta")
        text = store.path_for(HOST).read_text()
        assert text.index("alpha") < text.index("mid") < text.index("zeta")

    def test_merge_order_does_not_matter(self, tmp_path):
        one = InventoryStore(tmp_path / "one")
        two = InventoryStore(tmp_path / "two")
        entries = [("g1", "a"), ("g2/sub", "b"), ("g1", "c")]

        for group, name in entries:
            one.merge(HOST, group, name)
        for group, name in reversed(entries):
            two.merge(HOST, group, name)

        assert one.path_for(HOST).read_bytes() == two.path_for(HOST).read_bytes()

    def test_merge_many(self, store):
        store.merge(HOST, "g", "existing")
        snapshot = store.merge_many(HOST, [
            RepositoryIdentity(HOST, "g", "new"),
            RepositoryIdentity(HOST, "other/group", "x"),
        ])

        assert snapshot.groups == {"g": ("existing", "new"), "other/group": ("x",)}
        assert store.load(HOST) == snapshot

    def test_watched_inventory_is_separate(self, store):
        store.merge(HOST, "g", "all")
        store.merge(HOST, "g", "mine", watched=True)

        assert store.path_for(HOST, watched=True).name == f"{HOST}-watched.toml"
        assert store.load(HOST).groups == {"g": ("all",)}
        assert store.load(HOST, watched=True).groups == {"g": ("mine",)}

    def test_failed_replace_keeps_previous_file(self, store):
        store.merge(HOST, "g", "a")
        before = store.path_for(HOST).read_bytes()

        with patch('gits.infra.inventory_store.os.replace', side_effect=OSError("disk full")):
            with pytest.raises(InventoryIOError) as exc_info:
                store.merge(HOST, "g", "b")

        assert exc_info.value.exit_code == 74
        assert store.path_for(HOST).read_bytes() == before
        assert list(store.root.glob(".*.tmp")) == []


class TestInventoryStoreLoad:
    """Tests for reading inventory files."""

    def test_missing_file_is_empty(self, store):
        snapshot = store.load(HOST)

        assert snapshot.host == HOST
        assert len(snapshot) == 0
        assert not store.path_for(HOST).exists()

    def test_malformed_file(self, store):
        store.path_for(HOST).write_text("[groups\nnot toml")

        with pytest.raises(ConfigError):
            store.load(HOST)

    def test_reads_hand_written_file(self, store):
        store.path_for(HOST).write_text(
            '[groups]\n"squad/tools" = ["mytool", "another"]\nsolo = ["x"]\n'
        )

        assert store.load(HOST).groups == {
            "solo": ("x",),
            "squad/tools": ("another", "mytool"),
        }

    def test_hosts(self, store):
        store.merge("a.example", "g", "x")
        store.merge("b.example", "g", "y")
        store.merge("b.example", "g", "y", watched=True)
        (store.root / "config.toml").write_text("[remotes]\n")

        assert store.hosts() == ["a.example", "b.example"]
        assert store.hosts(watched=True) == ["b.example"]
        assert set(store.load_all()) == {"a.example", "b.example"}

    def test_hosts_without_root(self, tmp_path):
        assert InventoryStore(tmp_path / "missing").hosts() == []
