"""Tests for registry persistence."""

import json
from datetime import datetime, timezone

import pytest

from benchforge.models import Attachment, BenchmarkResults, Model, RegistryState, User
from benchforge.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    RegistryCodec,
    StorageError,
)


def make_results(**overrides) -> BenchmarkResults:
    values = dict(
        accuracy=92.5,
        inference_time=12.3,
        memory_usage=134217728,
        fps=30,
        latency=5,
        throughput=29.9,
    )
    values.update(overrides)
    return BenchmarkResults(**values)


def strip_attachments(models):
    return [m.model_copy(update={"attachment": None}) for m in models]


class TestInMemoryKeyValueStore:
    """Test in-memory key-value store."""

    @pytest.fixture
    def store(self):
        return InMemoryKeyValueStore()

    def test_set_and_get(self, store):
        store.set_item("k", "v")
        assert store.get_item("k") == "v"

    def test_get_missing(self, store):
        assert store.get_item("missing") is None

    def test_remove(self, store):
        store.set_item("k", "v")
        store.remove_item("k")
        store.remove_item("k")
        assert store.get_item("k") is None

    def test_clear_store(self, store):
        store.set_item("k", "v")
        store.clear()
        assert store.keys() == []


class TestFileKeyValueStore:
    """Test file-backed key-value store."""

    @pytest.fixture
    def store(self, tmp_path):
        return FileKeyValueStore(tmp_path / "slots")

    def test_set_and_get(self, store):
        """Test values survive a new store instance."""
        store.set_item("model-storage", '{"a": 1}')

        reopened = FileKeyValueStore(store.directory)
        assert reopened.get_item("model-storage") == '{"a": 1}'
        assert (store.directory / "model-storage.json").exists()

    def test_get_missing(self, store):
        assert store.get_item("model-storage") is None

    def test_remove(self, store):
        store.set_item("model-storage", "x")
        store.remove_item("model-storage")
        store.remove_item("model-storage")
        assert store.get_item("model-storage") is None

    def test_invalid_utf8_raises_storage_error(self, store):
        store.directory.mkdir(parents=True)
        (store.directory / "model-storage.json").write_bytes(b"\xff\xfe\x80")

        with pytest.raises(StorageError):
            store.get_item("model-storage")


class FailingStore(KeyValueStore):
    """Store whose writes always fail."""

    def get_item(self, key):
        return None

    def set_item(self, key, value):
        raise StorageError("disk full")

    def remove_item(self, key):
        raise StorageError("disk full")


class TestRegistryCodec:
    """Test snapshot encoding and decoding."""

    @pytest.fixture
    def codec(self):
        return RegistryCodec()

    @pytest.fixture
    def state(self):
        return RegistryState(
            models=(
                Model(
                    name="resnet.onnx",
                    format="onnx",
                    size=2048,
                    attachment=Attachment(filename="resnet.onnx", content=b"data"),
                    benchmark_results=make_results(gpu_utilization=71.0),
                ),
                Model(name="net.pt", format="pt", size=10),
            ),
            is_authenticated=True,
            user=User(id="u-1", email="dev@example.com"),
        )

    def test_encode_envelope(self, codec, state):
        """Test envelope layout and camelCase keys."""
        envelope = json.loads(codec.encode(state))

        assert envelope["version"] == 0
        assert envelope["state"]["isAuthenticated"] is True
        assert envelope["state"]["user"] == {"id": "u-1", "email": "dev@example.com"}

        first, second = envelope["state"]["models"]
        assert "attachment" not in first
        assert first["benchmarkResults"]["inferenceTime"] == 12.3
        assert first["benchmarkResults"]["gpuUtilization"] == 71.0
        assert "createdAt" in first
        assert "benchmarkResults" not in second

    def test_encode_omits_absent_gpu_utilization(self, codec):
        state = RegistryState(
            models=(Model(name="a.pt", format="pt", size=1, benchmark_results=make_results()),)
        )
        record = json.loads(codec.encode(state))["state"]["models"][0]

        assert "gpuUtilization" not in record["benchmarkResults"]

    def test_round_trip(self, codec, state):
        """Test every durable field survives; attachments do not."""
        decoded = codec.decode(codec.encode(state))

        assert decoded is not None
        assert list(decoded.models) == strip_attachments(state.models)
        assert decoded.models[0].attachment is None
        assert decoded.is_authenticated is True
        assert decoded.user == state.user

    @pytest.mark.parametrize("count", [0, 1])
    def test_round_trip_small_states(self, codec, count):
        models = tuple(Model(name=f"m{i}.onnx", format="onnx", size=i) for i in range(count))
        state = RegistryState(models=models)

        decoded = codec.decode(codec.encode(state))

        assert list(decoded.models) == strip_attachments(models)

    def test_round_trip_infinite_fps(self, codec):
        state = RegistryState(
            models=(
                Model(
                    name="a.onnx",
                    format="onnx",
                    size=1,
                    benchmark_results=make_results(fps=float("inf")),
                ),
            )
        )

        decoded = codec.decode(codec.encode(state))

        assert decoded.models[0].benchmark_results.fps == float("inf")

    def test_decode_fills_defaults(self, codec):
        """Test missing session fields and null results normalize to absent."""
        raw = json.dumps(
            {
                "state": {
                    "models": [
                        {
                            "id": "m-1",
                            "name": "a.onnx",
                            "format": "onnx",
                            "size": 5,
                            "createdAt": "2024-05-01T10:00:00Z",
                            "benchmarkResults": None,
                        }
                    ]
                },
                "version": 0,
            }
        )

        decoded = codec.decode(raw)

        assert decoded.is_authenticated is False
        assert decoded.user is None
        assert decoded.models[0].benchmark_results is None
        assert decoded.models[0].created_at == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    def test_decode_ignores_stale_file_field(self, codec):
        raw = json.dumps(
            {
                "state": {
                    "models": [
                        {
                            "id": "m-1",
                            "name": "a.onnx",
                            "format": "onnx",
                            "size": 5,
                            "createdAt": "2024-05-01T10:00:00Z",
                            "file": {},
                        }
                    ],
                    "isAuthenticated": None,
                },
                "version": 0,
            }
        )

        decoded = codec.decode(raw)

        assert decoded.models[0].attachment is None
        assert decoded.is_authenticated is False

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "[]",
            '"text"',
            '{"version": 0}',
            '{"state": [], "version": 0}',
            '{"state": {"models": {"a": 1}}, "version": 0}',
            '{"state": {"models": [{"name": "missing-id"}]}, "version": 0}',
            pytest.param("[" * 200000, id="deeply-nested"),
            '{"state": {"isAuthenticated": "maybe"}, "version": 0}',
        ],
    )
    def test_decode_corrupt_returns_none(self, codec, raw):
        """Test corrupt records never raise."""
        assert codec.decode(raw) is None

    def test_decode_rejects_duplicate_ids(self, codec):
        model = {"id": "dup", "name": "a.pt", "format": "pt", "size": 1,
                 "createdAt": "2024-05-01T10:00:00Z"}
        raw = json.dumps({"state": {"models": [model, model]}, "version": 0})

        assert codec.decode(raw) is None

    def test_load_empty_slot(self, codec):
        state = codec.load(InMemoryKeyValueStore())

        assert state == RegistryState()

    def test_decode_validates_stored_session_flag(self, codec):
        """Test a stored string flag is validated rather than coerced by truthiness."""
        raw = json.dumps({"state": {"models": [], "isAuthenticated": "false"}, "version": 0})

        assert codec.decode(raw).is_authenticated is False

    def test_load_undecodable_file_slot(self, codec, tmp_path):
        """Test a slot file that is not UTF-8 loads as empty and is cleared."""
        store = FileKeyValueStore(tmp_path)
        (tmp_path / "model-storage.json").write_bytes(b"\xff\xfe garbage \x80")

        state = codec.load(store)

        assert state == RegistryState()
        assert not (tmp_path / "model-storage.json").exists()

    def test_load_corrupt_slot_clears_it(self, codec):
        """Test corrupt slots are discarded and the default state returned."""
        store = InMemoryKeyValueStore({"model-storage": "{corrupt"})

        state = codec.load(store)

        assert state.models == ()
        assert state.is_authenticated is False
        assert store.get_item("model-storage") is None

    def test_load_after_save(self, codec, state):
        store = InMemoryKeyValueStore()
        codec.save(store, state)

        loaded = codec.load(store)

        assert list(loaded.models) == strip_attachments(state.models)

    def test_custom_key(self, state):
        store = InMemoryKeyValueStore()
        RegistryCodec(key="other").save(store, state)

        assert store.keys() == ["other"]

    def test_save_failure_is_absorbed(self, codec, state):
        """Test write failures are logged rather than raised."""
        codec.save(FailingStore(), state)
