from srms.client.storage import LocalStorage


def test_set_get_and_remove_items(tmp_path) -> None:
    storage = LocalStorage(str(tmp_path / 'nested' / 'storage.json'))

    storage.set_item('auth-storage', '{"state": {}}')
    storage.set_item('theme', 'dark')

    assert storage.get_item('auth-storage') == '{"state": {}}'
    assert sorted(storage.keys()) == ['auth-storage', 'theme']

    storage.remove_item('theme')
    storage.remove_item('never-set')

    assert storage.get_item('theme') is None
    assert storage.keys() == ['auth-storage']


def test_items_survive_a_new_instance(tmp_path) -> None:
    path = str(tmp_path / 'storage.json')
    LocalStorage(path).set_item('auth-storage', 'value')

    assert LocalStorage(path).get_item('auth-storage') == 'value'


def test_missing_or_corrupt_file_reads_as_empty(tmp_path) -> None:
    path = tmp_path / 'storage.json'
    storage = LocalStorage(str(path))

    assert storage.get_item('anything') is None

    path.write_text('{not json', encoding='utf-8')
    assert storage.keys() == []

    storage.set_item('key', 'value')
    assert storage.get_item('key') == 'value'


def test_clear_removes_everything(tmp_path) -> None:
    storage = LocalStorage(str(tmp_path / 'storage.json'))
    storage.set_item('a', '1')
    storage.set_item('b', '2')

    storage.clear()

    assert storage.keys() == []
