import uuid

import pytest
from sqlalchemy import insert, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable

from src.db.uuid_array import (
    ArrayColumnCodec,
    InvalidElement,
    UnsupportedInputType,
    UUIDArray,
    UUIDArrayCodec,
)
from src.models import BoardList
from src.models.repositories import ListRepository

FIRST = uuid.UUID("11111111-1111-1111-1111-111111111111")
SECOND = uuid.UUID("22222222-2222-2222-2222-222222222222")
BOARD = uuid.UUID("33333333-3333-3333-3333-333333333333")


def test_column_type_declares_array_storage_type():
    column_type = BoardList.__table__.c.card_ids.type
    assert isinstance(column_type, UUIDArray)
    assert column_type.storage_type == "uuid[]"
    assert isinstance(column_type.codec, UUIDArrayCodec)
    assert column_type.python_type is list


def test_codec_satisfies_column_codec_protocol():
    codec: ArrayColumnCodec = UUIDArrayCodec()
    assert codec.encode([]) == "{}"


def test_postgresql_ddl_uses_native_uuid_array():
    ddl = str(
        CreateTable(BoardList.__table__).compile(dialect=postgresql.dialect())
    )
    assert "card_ids UUID[]" in ddl


def test_sqlite_ddl_stores_literal_as_text():
    ddl = str(CreateTable(BoardList.__table__).compile(dialect=sqlite.dialect()))
    assert "card_ids TEXT" in ddl


def test_postgresql_binds_and_selects_through_casts():
    dialect = postgresql.dialect()
    stmt = insert(BoardList.__table__).values(
        public_id=FIRST, board_public_id=BOARD, title="x", card_ids=[FIRST]
    )
    insert_sql = str(stmt.compile(dialect=dialect))
    assert "CAST(" in insert_sql
    assert "AS UUID[])" in insert_sql

    select_sql = str(select(BoardList.card_ids).compile(dialect=dialect))
    assert "CAST(lists.card_ids AS TEXT)" in select_sql


def test_bind_and_result_processing():
    column_type = UUIDArray()
    dialect = sqlite.dialect()
    assert column_type.process_bind_param([], dialect) == "{}"
    assert column_type.process_bind_param(None, dialect) is None
    assert column_type.process_result_value(None, dialect) is None
    assert column_type.process_result_value(
        '{"11111111-1111-1111-1111-111111111111"}', dialect
    ) == [FIRST]
    with pytest.raises(UnsupportedInputType):
        column_type.process_result_value(12, dialect)


def test_sqlite_round_trip_through_orm(database):
    cards = [SECOND, FIRST, SECOND]
    with database.transaction(name="test.write") as session:
        created = ListRepository(session).create_list(
            board_public_id=BOARD, title="Backlog", card_ids=cards
        )
        public_id = created.public_id

    with database.transaction(name="test.read") as session:
        loaded = ListRepository(session).get_by_public_id(public_id)
        assert loaded is not None
        assert loaded.card_ids == cards


def test_stored_value_is_quoted_array_literal(database):
    with database.transaction(name="test.write") as session:
        ListRepository(session).create_list(
            board_public_id=BOARD, title="Doing", card_ids=[FIRST, SECOND]
        )

    with database.engine.connect() as connection:
        stored = connection.execute(text("SELECT card_ids FROM lists")).scalar_one()
    assert stored == (
        '{"11111111-1111-1111-1111-111111111111",'
        '"22222222-2222-2222-2222-222222222222"}'
    )


def test_empty_list_is_stored_as_empty_literal(database):
    with database.transaction(name="test.write") as session:
        ListRepository(session).create_list(board_public_id=BOARD, title="Done")

    with database.engine.connect() as connection:
        stored = connection.execute(text("SELECT card_ids FROM lists")).scalar_one()
    assert stored == "{}"


def test_legacy_unquoted_rows_are_readable(database):
    with database.transaction(name="test.write") as session:
        public_id = ListRepository(session).create_list(
            board_public_id=BOARD, title="Legacy"
        ).public_id

    with database.engine.begin() as connection:
        connection.execute(
            text("UPDATE lists SET card_ids = :raw"),
            {
                "raw": "{ 22222222-2222-2222-2222-222222222222 , "
                "11111111-1111-1111-1111-111111111111 }"
            },
        )

    with database.transaction(name="test.read") as session:
        loaded = ListRepository(session).get_by_public_id(public_id)
        assert loaded.card_ids == [SECOND, FIRST]


def test_corrupt_row_fails_the_read(database):
    with database.transaction(name="test.write") as session:
        public_id = ListRepository(session).create_list(
            board_public_id=BOARD, title="Broken", card_ids=[FIRST]
        ).public_id

    with database.engine.begin() as connection:
        connection.execute(
            text("UPDATE lists SET card_ids = :raw"),
            {"raw": '{"11111111-1111-1111-1111-111111111111","not-a-uuid"}'},
        )

    with pytest.raises(InvalidElement) as excinfo:
        with database.transaction(name="test.read") as session:
            ListRepository(session).get_by_public_id(public_id)
    assert excinfo.value.token == "not-a-uuid"


def test_postgresql_text_cast_keeps_result_processing():
    dialect = postgresql.dialect()
    compiled = select(BoardList).compile(dialect=dialect)
    result_types = {
        column[0]: column[3] for column in compiled._result_columns
    }
    assert isinstance(result_types["card_ids"], UUIDArray)

    column = BoardList.__table__.c.card_ids
    expression = column.type.dialect_impl(dialect).column_expression(column)
    assert isinstance(expression.type, UUIDArray)


def test_postgresql_result_processor_decodes_and_rejects():
    dialect = postgresql.dialect()
    processor = UUIDArray().dialect_impl(dialect).result_processor(dialect, None)
    assert processor is not None
    assert processor("{11111111-1111-1111-1111-111111111111}") == [FIRST]
    with pytest.raises(InvalidElement):
        processor('{"not-a-uuid"}')
