from utils.autofix import AutoFixer, auto_fix
from utils.validators import RuleConfiguration, validate


def test_inline_commented_where_is_activated():
    result = auto_fix("DELETE FROM users -- WHERE id = 1;")
    assert result.fixed_text == "DELETE FROM users WHERE id = 1;"
    assert result.fixes_applied == ("Query 1: Activated WHERE clause from comment: WHERE id = 1",)
    assert result.validation.is_valid
    assert validate(result.fixed_text).is_valid


def test_fix_is_idempotent():
    first = auto_fix("DELETE FROM users -- WHERE id = 1;")
    second = auto_fix(first.fixed_text)
    assert second.fixes_applied == ()
    assert second.fixed_text == first.fixed_text


def test_commented_where_on_its_own_line():
    result = auto_fix("UPDATE users SET active = 0\n-- WHERE id = 7;")
    assert result.fixed_text == "UPDATE users SET active = 0\nWHERE id = 7;"
    assert result.validation.is_valid


def test_other_line_comments_do_not_swallow_the_clause():
    result = auto_fix("UPDATE t SET x = 1 -- bump\n--   WHERE id = 9")
    assert result.fixed_text == "UPDATE t SET x = 1 -- bump\nWHERE id = 9;"
    assert result.validation.is_valid


def test_only_dangerous_dml_statements_are_rewritten():
    result = auto_fix("DELETE FROM a -- WHERE id = 1; UPDATE b SET x = 2 WHERE id = 3")
    assert result.fixed_text == "DELETE FROM a WHERE id = 1; UPDATE b SET x = 2 WHERE id = 3;"
    assert len(result.fixes_applied) == 1
    assert result.fixes_applied[0].startswith("Query 1:")
    assert result.validation.is_valid
    assert result.validation.statement_count == 2


def test_select_with_commented_where_is_left_alone():
    result = auto_fix("SELECT * FROM t -- WHERE id = 1;")
    assert result.fixes_applied == ()
    assert result.fixed_text == "SELECT * FROM t -- WHERE id = 1;"
    assert not result.validation.is_valid


def test_missing_where_is_never_invented():
    result = auto_fix("DELETE FROM users;")
    assert result.fixes_applied == ()
    assert "WHERE" not in result.fixed_text
    assert not result.validation.is_valid


def test_valid_input_passes_through_unchanged():
    text = "SELECT *\nFROM t\nLIMIT 5;"
    result = auto_fix(text)
    assert result.fixed_text == text
    assert result.original_text == text
    assert result.validation.is_valid


def test_fix_uses_the_given_configuration():
    result = auto_fix("DROP TABLE t;", RuleConfiguration(allow_drop=True))
    assert result.validation.is_valid


def test_activate_commented_where_without_clause():
    assert AutoFixer.activate_commented_where("DELETE FROM t") == ("DELETE FROM t", None)


def test_to_dict_uses_api_field_names():
    data = auto_fix("DELETE FROM users -- WHERE id = 1;").to_dict()
    assert data['originalText'] == "DELETE FROM users -- WHERE id = 1;"
    assert data['fixedText'] == "DELETE FROM users WHERE id = 1;"
    assert data['fixesApplied'] == ["Query 1: Activated WHERE clause from comment: WHERE id = 1"]
    assert data['validation']['isValid'] is True


def test_earlier_comment_marker_on_the_line_is_dropped():
    result = auto_fix("DELETE FROM t --x // WHERE id = 1")
    assert result.fixed_text == "DELETE FROM t WHERE id = 1;"
    assert result.fixes_applied == ("Query 1: Activated WHERE clause from comment: WHERE id = 1",)
    assert result.validation.is_valid


def test_fix_is_not_reported_when_clause_stays_inert():
    text = "DELETE FROM t\n-- WHERE\n-- WHERE id = 1"
    assert AutoFixer.activate_commented_where(text) == (text, None)

    result = auto_fix(text)
    assert result.fixes_applied == ()
    assert result.fixed_text == text + ";"
    assert "found only in a comment" in result.validation.errors[0]
