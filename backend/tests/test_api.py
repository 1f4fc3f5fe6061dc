import pytest

from findme import parse_tile


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_state_hides_winning_tile(client, store):
    store.join('Alice')
    store.start()
    res = client.get('/state')
    assert res.status_code == 200
    data = res.get_json()
    assert data['GameInProgress'] is True
    assert data['Players'] == ['Alice']
    assert data['CurrentId'] == 0
    assert set(data) == {'GameInProgress', 'Players', 'Board', 'CurrentId'}
    assert all(tile == 0 for row in data['Board'] for tile in row)


@pytest.mark.parametrize('value, expected', [
    (None, None),
    ('', None),
    ('0,0', (0, 0)),
    (' 3 , 1 ', (3, 1)),
    ((2, 2), (2, 2)),
])
def test_parse_tile(value, expected):
    assert parse_tile(value, 4) == expected


@pytest.mark.parametrize('value', ['1', '1,2,3', 'a,b', '4,0', '0,-1'])
def test_parse_tile_rejects_bad_values(value):
    with pytest.raises(ValueError):
        parse_tile(value, 4)
