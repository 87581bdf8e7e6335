from connect_hub.database.bootstrap import clean_script, iter_sql_statements


def test_semicolons_inside_literals_do_not_split():
    sql = "INSERT INTO posts (title) VALUES ('a; b'); SELECT `x;y` FROM t;"
    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO posts (title) VALUES ('a; b')",
        "SELECT `x;y` FROM t",
    ]


def test_escaped_quote_stays_inside_literal():
    sql = "INSERT INTO t VALUES ('it\\'s; fine'); DELETE FROM t"
    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('it\\'s; fine')",
        "DELETE FROM t",
    ]


def test_clean_script_drops_comments_and_database_directives():
    sql = "-- header\nCREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE a (id INT);\n"
    assert list(iter_sql_statements(clean_script(sql))) == ["CREATE TABLE a (id INT)"]
