from json_records.records.matching import loose_equals, strict_equals


def test_loose_equals_coerces_numeric_strings():
    assert loose_equals("5", 5)
    assert loose_equals(5, "5.0")
    assert loose_equals(5, 5.0)
    assert not loose_equals("5", 6)
    assert not loose_equals("abc", 0)


def test_loose_equals_edge_values():
    assert loose_equals("", 0)
    assert loose_equals(True, 1)
    assert loose_equals(None, None)
    assert not loose_equals(None, 0)
    assert not loose_equals("5", "5.0")
    assert not loose_equals([5], 5)


def test_strict_equals_requires_same_type():
    assert strict_equals(5, 5)
    assert strict_equals(5, 5.0)
    assert strict_equals("5", "5")
    assert not strict_equals("5", 5)
    assert not strict_equals(True, 1)
    assert not strict_equals(None, 0)
