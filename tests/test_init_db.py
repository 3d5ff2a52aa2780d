# tests/test_init_db.py
from token_studio import init_db


def test_init_db_creates_tables(mocker):
    create = mocker.patch.object(init_db, "create_tables")
    drop = mocker.patch.object(init_db, "drop_tables")

    init_db.main([])

    create.assert_called_once_with()
    drop.assert_not_called()


def test_init_db_can_reset(mocker):
    calls = []
    mocker.patch.object(init_db, "drop_tables", side_effect=lambda: calls.append("drop"))
    mocker.patch.object(init_db, "create_tables", side_effect=lambda: calls.append("create"))

    init_db.main(["--drop-tables"])

    assert calls == ["drop", "create"]
