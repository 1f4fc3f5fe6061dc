import pytest

from findme.services.game import ConnectionRegistry


def test_connect_claim_release():
    registry = ConnectionRegistry()
    registry.connect('sid-1')
    registry.connect('sid-2')
    assert len(registry) == 2
    assert registry.identity('sid-1') is None

    registry.claim('sid-1', 'Alice')
    assert registry.identity('sid-1') == 'Alice'
    assert registry.identities() == ['Alice']

    assert registry.release('sid-1') == 'Alice'
    assert 'sid-1' not in registry
    assert registry.release('sid-2') is None
    assert registry.release('missing') is None


def test_identity_is_claimed_once():
    registry = ConnectionRegistry()
    registry.connect('sid-1')
    registry.claim('sid-1', 'Alice')
    with pytest.raises(ValueError):
        registry.claim('sid-1', 'Bob')
    with pytest.raises(KeyError):
        registry.claim('missing', 'Bob')


def test_clear_identity_keeps_connection():
    registry = ConnectionRegistry()
    registry.connect('sid-1', room_id='lobby')
    registry.claim('sid-1', 'Alice')
    assert registry.clear_identity('sid-1') == 'Alice'
    assert 'sid-1' in registry
    assert registry.identity('sid-1') is None
    registry.claim('sid-1', 'Alice')
    assert registry.identity('sid-1') == 'Alice'
