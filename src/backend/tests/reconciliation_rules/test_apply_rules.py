from common.reconciliation_rules.applicator import apply_rules
from common.reconciliation_rules.models import Transaction


def _contains(value: str) -> dict:
    return {"field": "description", "operator": "contains", "value": value}


def test_empty_rule_list_returns_input_unchanged(make_transaction):
    records = [make_transaction(description="Coffee")]
    assert apply_rules(records, []) is records


def test_records_are_not_mutated(make_transaction, make_rule):
    tx = make_transaction(description="Coffee House", category_id="cat-old")
    [out] = apply_rules([tx], [make_rule(_contains("coffee"), set_category_id="cat-coffee")])
    assert out is not tx
    assert tx.category_id == "cat-old"
    assert tx.original_description is None
    assert out.category_id == "cat-coffee"


def test_last_write_wins_and_tags_union(make_transaction, make_rule):
    rule1 = make_rule(_contains("coffee"), rule_id="r1", set_category_id="X", assign_tag_ids=["t1"])
    rule2 = make_rule(_contains("house"), rule_id="r2", set_category_id="Y", assign_tag_ids=["t2", "t1"])
    [out] = apply_rules([make_transaction(description="Coffee House")], [rule1, rule2])
    assert out.category_id == "Y"
    assert set(out.tag_ids) == {"t1", "t2"}
    assert len(out.tag_ids) == 2


def test_existing_tags_are_kept(make_transaction, make_rule):
    tx = make_transaction(description="Coffee", tag_ids=["t0"])
    [out] = apply_rules([tx], [make_rule(_contains("coffee"), assign_tag_ids=["t1"])])
    assert out.tag_ids == ["t0", "t1"]


def test_skip_import_is_sticky_regardless_of_order(make_transaction, make_rule):
    skip = make_rule(_contains("coffee"), rule_id="skip", skip_import=True)
    plain = make_rule(_contains("coffee"), rule_id="plain", set_category_id="cat")
    for rules in ([plain, skip], [skip, plain]):
        [out] = apply_rules([make_transaction(description="Coffee")], rules)
        assert out.is_ignored is True


def test_applied_rule_ids_in_match_order(make_transaction, make_rule):
    rules = [
        make_rule(_contains("coffee"), rule_id="r1"),
        make_rule(_contains("tea"), rule_id="r2"),
        make_rule(_contains("house"), rule_id="r3"),
    ]
    [out] = apply_rules([make_transaction(description="Coffee House")], rules)
    assert out.applied_rule_ids == ["r1", "r3"]
    assert out.applied_rule_id == "r1"


def test_unmatched_record_only_gets_original_description(make_transaction, make_rule):
    [out] = apply_rules(
        [make_transaction(description="Gas Station")],
        [make_rule(_contains("coffee"), set_category_id="cat")],
    )
    assert out.original_description == "Gas Station"
    assert out.category_id is None
    assert out.applied_rule_ids is None


def test_original_description_is_captured_before_rewrite(make_transaction, make_rule):
    rename = make_rule(_contains("sq *blue bottle"), rule_id="rename", set_description="Blue Bottle Coffee")
    [out] = apply_rules([make_transaction(description="SQ *BLUE BOTTLE 0042")], [rename])
    assert out.description == "Blue Bottle Coffee"
    assert out.original_description == "SQ *BLUE BOTTLE 0042"


def test_existing_original_description_is_never_overwritten(make_transaction, make_rule):
    tx = make_transaction(description="Edited", original_description="BANK TEXT")
    [out] = apply_rules([tx], [make_rule(_contains("bank text"), set_description="Renamed")])
    assert out.original_description == "BANK TEXT"
    assert out.description == "Renamed"


def test_later_rules_see_earlier_mutations(make_transaction, make_rule):
    set_cp = make_rule(_contains("starbucks"), rule_id="r1", set_counterparty_id="cp-sbux")
    by_cp = make_rule(
        {"field": "counterpartyId", "operator": "equals", "value": "cp-sbux"},
        rule_id="r2",
        set_category_id="cat-coffee",
    )
    [out] = apply_rules([make_transaction(description="STARBUCKS #123")], [set_cp, by_cp])
    assert out.counterparty_id == "cp-sbux"
    assert out.category_id == "cat-coffee"


def test_counterparty_setter_wins_over_payee_synonym(make_transaction, make_rule):
    rule = make_rule(_contains("coffee"), set_payee_id="payee-old", set_counterparty_id="cp-new")
    [out] = apply_rules([make_transaction(description="Coffee")], [rule])
    assert out.counterparty_id == "cp-new"

    payee_only = make_rule(_contains("coffee"), set_payee_id="payee-old")
    [out] = apply_rules([make_transaction(description="Coffee")], [payee_only])
    assert out.counterparty_id == "payee-old"


def test_all_setters_applied(make_transaction, make_rule):
    rule = make_rule(
        _contains("coffee"),
        set_category_id="cat",
        set_location_id="loc",
        set_user_id="user",
        set_transaction_type_id="type-expense",
        set_description="Coffee",
    )
    [out] = apply_rules([make_transaction(description="COFFEE #9")], [rule])
    assert (out.category_id, out.location_id, out.user_id, out.type_id, out.description) == (
        "cat",
        "loc",
        "user",
        "type-expense",
        "Coffee",
    )


def test_none_records_are_dropped_and_dicts_accepted(make_rule):
    rule = make_rule(_contains("coffee"), set_category_id="cat")
    out = apply_rules(
        [None, {"id": "t1", "description": "Coffee", "amount": -4.5, "date": "2024-01-02"}],
        [rule.model_dump(by_alias=True)],
    )
    assert len(out) == 1
    assert isinstance(out[0], Transaction)
    assert out[0].category_id == "cat"
    assert out[0].model_dump(by_alias=True)["date"] == "2024-01-02"


def test_rules_without_id_or_unreadable_are_ignored(make_transaction, make_rule):
    records = [make_transaction(description="Coffee")]
    rules = [
        make_rule(_contains("coffee"), rule_id="", set_category_id="cat"),
        {"id": "bad", "conditions": [_contains("coffee")], "assignTagIds": 5},
    ]
    assert apply_rules(records, rules) is records


def test_rule_with_null_name_and_scope_still_applies(make_transaction):
    rule = {
        "id": "r1",
        "name": None,
        "scope": None,
        "conditions": [_contains("coffee")],
        "setCategoryId": "X",
    }
    [out] = apply_rules([make_transaction(description="Coffee")], [rule])
    assert out.category_id == "X"
    assert out.applied_rule_ids == ["r1"]


def test_null_condition_id_still_gates_the_rule(make_transaction):
    rule = {
        "id": "r1",
        "conditions": [{"id": None, **_contains("gas")}, _contains("coffee")],
        "setCategoryId": "X",
    }
    [out] = apply_rules([make_transaction(description="Coffee")], [rule])
    assert out.category_id is None
    assert out.applied_rule_ids is None


def test_null_and_empty_record_tag_ids_are_skipped(make_rule):
    rule = make_rule(_contains("coffee"), assign_tag_ids=["t1"])
    [out] = apply_rules([{"description": "Coffee", "amount": 1, "tagIds": [None, "t0", ""]}], [rule])
    assert out.tag_ids == ["t0", "t1"]
