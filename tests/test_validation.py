from applock.validation import collect_issues, validate_pin, validate_pin_confirmation


def test_validate_pin_accepts_digits_of_exact_length():
    assert validate_pin("0042", length=4) == []
    assert validate_pin("123456", length=6) == []


def test_validate_pin_empty():
    issues = validate_pin("", length=4)

    assert len(issues) == 1
    assert issues[0].field == "pin"
    assert "Enter" in issues[0].message


def test_validate_pin_wrong_length():
    issues = validate_pin("123", length=4)

    assert [issue.field for issue in issues] == ["pin"]
    assert "4 digits" in issues[0].message


def test_validate_pin_rejects_non_ascii_digits():
    assert validate_pin("12a4", length=4)
    assert validate_pin("١٢٣٤", length=4)


def test_validate_pin_custom_field():
    issues = validate_pin("1", length=4, field="new_pin")

    assert issues[0].field == "new_pin"


def test_confirmation_mismatch():
    assert validate_pin_confirmation("1234", "1234") == []
    issues = validate_pin_confirmation("1234", "4321")
    assert issues[0].field == "confirm_pin"


def test_collect_issues_flattens():
    issues = collect_issues(validate_pin("", length=4), validate_pin_confirmation("1", "2"))

    assert [issue.field for issue in issues] == ["pin", "confirm_pin"]
