from common.reconciliation_rules.matcher import evaluate_condition


def test_account_equals_compares_ids(make_transaction, make_condition, accounts):
    tx = make_transaction(account_id="acct-chk")
    assert evaluate_condition(tx, make_condition("accountId", "equals", "ACCT-CHK"), accounts)
    assert not evaluate_condition(tx, make_condition("accountId", "equals", "Chase Checking"), accounts)


def test_account_other_operators_use_account_name(make_transaction, make_condition, accounts):
    tx = make_transaction(account_id="acct-amex")
    assert evaluate_condition(tx, make_condition("accountId", "contains", "amex"), accounts)
    assert evaluate_condition(tx, make_condition("accountId", "starts_with", "AMEX  plat"), accounts)
    assert not evaluate_condition(tx, make_condition("accountId", "contains", "chase"), accounts)


def test_unresolved_account_checks_empty_name(make_transaction, make_condition, accounts):
    tx = make_transaction(account_id="acct-unknown")
    assert not evaluate_condition(tx, make_condition("accountId", "contains", "chase"), accounts)
    assert evaluate_condition(tx, make_condition("accountId", "does_not_contain", "chase"), accounts)


def test_accounts_may_be_plain_mappings(make_transaction, make_condition):
    tx = make_transaction(account_id="a1")
    accounts = [{"id": "a1", "name": "Business Savings", "identifier": "x1234"}]
    assert evaluate_condition(tx, make_condition("accountId", "ends_with", "savings"), accounts)


def test_counterparty_and_location_equals(make_transaction, make_condition):
    tx = make_transaction(counterparty_id="cp-starbucks", location_id="loc-nyc")
    assert evaluate_condition(tx, make_condition("counterpartyId", "equals", "cp-starbucks"))
    assert evaluate_condition(tx, make_condition("locationId", "equals", " LOC-NYC "))
    assert not evaluate_condition(tx, make_condition("locationId", "equals", "loc-sf"))


def test_counterparty_and_location_other_operators_never_match(make_transaction, make_condition):
    tx = make_transaction(counterparty_id="cp-starbucks", location_id="loc-nyc")
    assert not evaluate_condition(tx, make_condition("counterpartyId", "contains", "starbucks"))
    assert not evaluate_condition(tx, make_condition("locationId", "starts_with", "loc"))


def test_unknown_field_never_matches(make_transaction, make_condition):
    tx = make_transaction(description="anything")
    assert not evaluate_condition(tx, make_condition("merchantCity", "equals", "anything"))
