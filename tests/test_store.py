# tests/test_store.py
import pytest

from services import StorageError, Store


def test_ambient_queries_return_plain_dicts(store):
    result = store.execute(
        "INSERT INTO tags (name, created_at) VALUES (:name, :now)",
        {'name': 'soup', 'now': 1},
    )
    assert result.rows_affected == 1
    assert result.generated_id is not None

    row = store.fetch_one("SELECT id, name FROM tags WHERE name = :name", {'name': 'soup'})
    assert row == {'id': result.generated_id, 'name': 'soup'}
    assert store.fetch_all("SELECT name FROM tags") == [{'name': 'soup'}]
    assert store.fetch_one("SELECT id FROM tags WHERE name = 'missing'") is None


def test_transaction_commits_on_success(store):
    def work(tx):
        tx.execute("INSERT INTO tags (name, created_at) VALUES ('a', 1)")
        tx.execute("INSERT INTO tags (name, created_at) VALUES ('b', 1)")
        return tx.fetch_one("SELECT COUNT(*) AS count FROM tags")['count']

    assert store.with_transaction(work) == 2
    assert store.fetch_one("SELECT COUNT(*) AS count FROM tags")['count'] == 2


def test_transaction_rolls_back_and_reraises(store):
    class Boom(Exception):
        pass

    with pytest.raises(Boom):
        with store.transaction() as tx:
            tx.execute("INSERT INTO tags (name, created_at) VALUES ('a', 1)")
            raise Boom()

    assert store.fetch_one("SELECT COUNT(*) AS count FROM tags")['count'] == 0


def test_store_methods_refuse_to_run_inside_a_transaction(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.fetch_one("SELECT 1 AS one")

    with pytest.raises(RuntimeError):
        store.with_transaction(lambda tx: store.with_transaction(lambda inner: None))

    # The guard is reset once the scope ends
    assert store.fetch_one("SELECT 1 AS one") == {'one': 1}


def test_transaction_handle_is_dead_after_scope(store):
    with store.transaction() as tx:
        tx.fetch_one("SELECT 1 AS one")

    with pytest.raises(RuntimeError):
        tx.fetch_one("SELECT 1 AS one")


def test_driver_errors_become_opaque_storage_errors(store):
    with pytest.raises(StorageError) as excinfo:
        store.fetch_all("SELECT * FROM no_such_table")
    assert 'no_such_table' not in str(excinfo.value)
    assert excinfo.value.status_code == 500

    with pytest.raises(StorageError):
        store.with_transaction(lambda tx: tx.execute("UPDATE no_such_table SET x = 1"))


def test_foreign_keys_are_enforced(store):
    with pytest.raises(StorageError):
        store.execute(
            "INSERT INTO ingredients (recipe_id, name, position) VALUES (999, 'salt', 0)"
        )


def test_store_from_url(tmp_path):
    other = Store.from_url(f"sqlite:///{tmp_path / 'other.db'}")
    try:
        other.execute("CREATE TABLE things (id INTEGER PRIMARY KEY, label TEXT)")
        other.execute("INSERT INTO things (label) VALUES ('x')")
        assert other.fetch_all("SELECT label FROM things") == [{'label': 'x'}]
    finally:
        other.dispose()


def test_read_runs_every_query_in_one_scope(store):
    store.execute("INSERT INTO tags (name, created_at) VALUES ('a', 1)")

    def work(tx):
        names = [row['name'] for row in tx.fetch_all("SELECT name FROM tags")]
        return names, tx.fetch_one("SELECT COUNT(*) AS count FROM tags")['count']

    assert store.read(work) == (['a'], 1)

    with pytest.raises(RuntimeError):
        store.read(lambda tx: store.fetch_all("SELECT name FROM tags"))
