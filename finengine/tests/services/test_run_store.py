"""Tests for InMemoryRunStore."""
import pytest

from finengine.core.types import RunConfiguration
from finengine.services.run_store import InMemoryRunStore


class TestInMemoryRunStore:
    """Test suite for InMemoryRunStore."""

    def test_configuration_round_trip(self):
        store = InMemoryRunStore()
        configuration = RunConfiguration(run_id='r1', selections=[{'name_en': 'Current Ratio'}])
        store.add_configuration(configuration)

        assert store.load('r1') is configuration
        assert store.load('r1').selections[0].name_en == 'Current Ratio'
        assert store.load('other') is None

    def test_snapshots_are_copied(self):
        store = InMemoryRunStore()
        snapshot = {'run_id': 'r1', 'status': 'pending', 'errors': []}
        store.save(snapshot)
        snapshot['errors'].append('changed later')

        assert store.latest('r1')['errors'] == []
        assert store.history('r1') == [{'run_id': 'r1', 'status': 'pending', 'errors': []}]

    def test_latest_and_history(self):
        store = InMemoryRunStore()
        store.save({'run_id': 'r1', 'status': 'pending'})
        store.save({'run_id': 'r1', 'status': 'processing'})

        assert store.latest('r1')['status'] == 'processing'
        assert len(store.history('r1')) == 2
        assert store.latest('missing') is None

    def test_snapshot_requires_run_id(self):
        with pytest.raises(ValueError):
            InMemoryRunStore().save({'status': 'pending'})
