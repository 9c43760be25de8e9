from src.settlement_engine.settlement_engine.database.bootstrap import iter_sql_statements


def test_iter_sql_statements_splits_outside_quotes():
    sql = """
    -- fee ledger
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES (1); INSERT INTO notes VALUES ('x;y', "z;w");
    """

    statements = list(iter_sql_statements(sql))

    assert statements == [
        "CREATE TABLE a (id INT)",
        "INSERT INTO a VALUES (1)",
        "INSERT INTO notes VALUES ('x;y', \"z;w\")",
    ]


def test_iter_sql_statements_keeps_unterminated_tail():
    assert list(iter_sql_statements("SELECT 1; SELECT 2")) == ["SELECT 1", "SELECT 2"]
