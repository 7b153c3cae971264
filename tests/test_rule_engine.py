"""
Test suite for the classification rule engine.

Exercises the full priority chain (payee rule > manual > auto-transfer >
auto-CC payment > pattern income > default), the merchant category pass,
user corrections and the re-run guarantees (idempotence and priority
monotonicity).
"""

import copy
import unittest
from datetime import datetime, timedelta

from ledger_engine import classify_transactions
from ledger_engine.categorisation.models import Transaction, ClassificationType
from ledger_engine.categorisation.priority import Classification, ClassificationPriority
from ledger_engine.config.classification_config import CLASSIFICATION_CONFIG
from ledger_engine.rules.rule_engine import RuleEngine
from ledger_engine.rules.rule_store import UserRule, UserRuleStore

BASE_DATE = datetime(2025, 5, 1, 9, 30)


def make_txn(txn_id, description, amount, account_id="checking", day=0, **kwargs):
    return Transaction(
        id=txn_id,
        account_id=account_id,
        posted=BASE_DATE + timedelta(days=day),
        amount=amount,
        description=description,
        **kwargs
    )


def snapshot(transactions):
    return [
        (t.id, t.category, t.classification_reason, t.matched_transfer_id, t.is_ignored)
        for t in transactions
    ]


class TestClassificationChain(unittest.TestCase):
    """Test the per-transaction priority chain."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = RuleEngine()

    def test_payee_rule_overrides_pattern(self):
        """Test a netflix rule replaces a merchant pattern label."""
        engine = RuleEngine(UserRuleStore([UserRule(payee="netflix", category="Subscriptions")]))
        txn = make_txn("t1", "CARD PURCHASE", "-15.49", payee="NETFLIX.COM")
        txn.classify("Entertainment", Classification.pattern("Netflix"))

        self.assertEqual(engine.classify(txn), ClassificationPriority.PAYEE_RULE)
        self.assertEqual(txn.category, "Subscriptions")
        self.assertEqual(txn.classification_reason, "Payee Rule: netflix")

    def test_payee_rule_overrides_manual(self):
        """Test a payee rule also replaces a manual label.

        Product intent check: rules sit above manual corrections, so a later
        rule silently wins over an earlier one-off correction.
        """
        engine = RuleEngine(UserRuleStore([UserRule(payee="Netflix", category="Subscriptions")]))
        txn = make_txn("t1", "NETFLIX.COM", "-15.49")
        txn.classify("Gifts", Classification.manual())

        self.assertEqual(engine.classify(txn), ClassificationPriority.PAYEE_RULE)
        self.assertEqual(txn.category, "Subscriptions")

    def test_manual_is_kept_without_rule(self):
        """Test no automatic detector touches a manual label."""
        txn = make_txn("t1", "ACME PAYROLL", "2500.00")
        txn.classify("Gifts", Classification.manual())

        self.assertEqual(self.engine.classify(txn), ClassificationPriority.MANUAL)
        self.assertEqual(txn.category, "Gifts")
        self.assertEqual(txn.classification_reason, "Manual")

    def test_credit_card_payment(self):
        """Test CC payment phrases on debits."""
        txn = make_txn("t1", "CHASE CREDIT CARD PAYMENT", "-500.00")

        self.assertEqual(self.engine.classify(txn), ClassificationPriority.AUTO_CC_PAYMENT)
        self.assertEqual(txn.category, "Transfer")
        self.assertEqual(txn.classification_reason, "Auto-CC Payment")

    def test_credit_card_payment_by_payee(self):
        """Test CC payment phrases found in the payee."""
        txn = make_txn("t1", "ONLINE PMT", "-75.00", payee="Autopay Payment Svc")

        self.assertEqual(self.engine.classify(txn), ClassificationPriority.AUTO_CC_PAYMENT)

    def test_credit_card_payment_credit_side_is_not_cc(self):
        """Test the card-side credit falls through to the default."""
        txn = make_txn("t1", "CREDIT CARD PAYMENT RECEIVED", "500.00", account_id="card")

        self.assertEqual(self.engine.classify(txn), ClassificationPriority.DEFAULT)
        self.assertEqual(txn.category, "Income")
        self.assertEqual(txn.classification_reason, "Default")

    def test_payroll_income(self):
        """Test the payroll scenario."""
        txn = make_txn("t1", "ACME CORP DIRECT DEPOSIT PAYROLL", "2500.00")

        self.assertEqual(self.engine.classify(txn), ClassificationPriority.PATTERN_INCOME)
        self.assertEqual(txn.category, "Income")
        self.assertEqual(txn.classification_reason, "Pattern: Payroll")

    def test_default_by_sign(self):
        """Test debits default to Expense and credits (including zero) to Income."""
        debit = make_txn("d", "XQZ 0000", "-10.00")
        credit = make_txn("c", "XQZ 0000", "10.00")
        zero = make_txn("z", "XQZ 0000", "0.00")

        for txn in (debit, credit, zero):
            self.assertEqual(self.engine.classify(txn), ClassificationPriority.DEFAULT)

        self.assertEqual(debit.category, "Expense")
        self.assertEqual(credit.category, "Income")
        self.assertEqual(zero.category, "Income")
        self.assertEqual(debit.classification_reason, "Default")

    def test_matched_transfer_short_circuits(self):
        """Test a linked leg reports auto-transfer without further detection."""
        txn = make_txn("t1", "CREDIT CARD PAYMENT", "-500.00", matched_transfer_id="other")
        txn.classify("Transfer", Classification.auto_transfer())

        self.assertEqual(self.engine.classify(txn), ClassificationPriority.AUTO_TRANSFER)
        self.assertEqual(txn.classification_reason, "Auto-Transfer")

    def test_stale_payee_rule_label_kept(self):
        """Test a label from a rule that no longer matches is not downgraded."""
        txn = make_txn("t1", "XQZ 0000", "-20.00")
        txn.classification_reason = "Payee Rule: Old Shop"
        txn.category = "Gifts"

        self.assertEqual(self.engine.classify(txn), ClassificationPriority.PAYEE_RULE)
        self.assertEqual(txn.category, "Gifts")

    def test_inactive_rule_not_applied(self):
        """Test deactivated rules are skipped."""
        engine = RuleEngine(UserRuleStore([
            UserRule(payee="Netflix", category="Subscriptions", is_active=False)
        ]))
        txn = make_txn("t1", "NETFLIX.COM", "-15.49")

        self.assertEqual(engine.classify(txn), ClassificationPriority.DEFAULT)
        self.assertEqual(txn.category, "Expense")

    def test_ignored_rule_flags_transaction(self):
        """Test an ignored-type rule sets the ignored flag."""
        engine = RuleEngine(UserRuleStore([
            UserRule(payee="Venmo", category="Ignored", classification_type="ignored")
        ]))
        txn = make_txn("t1", "VENMO CASHOUT", "40.00")

        engine.classify(txn)

        self.assertTrue(txn.is_ignored)
        self.assertEqual(txn.classification_type, ClassificationType.IGNORED)


class TestApplyBestRule(unittest.TestCase):
    """Test rule precedence and the force flag."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = RuleEngine()

    def test_first_matching_rule_wins(self):
        """Test rules are tried in order."""
        rules = [
            UserRule(payee="amazon", category="Shopping"),
            UserRule(payee="amazon prime", category="Entertainment"),
        ]
        txn = make_txn("t1", "AMAZON PRIME*MEMBERSHIP", "-14.99")

        self.assertTrue(self.engine.apply_best_rule(txn, rules))
        self.assertEqual(txn.category, "Shopping")
        self.assertEqual(txn.classification_reason, "Payee Rule: amazon")

    def test_no_matching_rule(self):
        """Test nothing is written without a match."""
        txn = make_txn("t1", "HULU", "-7.99")

        self.assertFalse(self.engine.apply_best_rule(txn, [UserRule(payee="Netflix", category="Subscriptions")]))
        self.assertIsNone(txn.category)

    def test_force_replaces_existing_rule_label(self):
        """Test force applies over an existing payee rule label."""
        txn = make_txn("t1", "NETFLIX.COM", "-15.49")
        txn.classify("Entertainment", Classification.payee_rule("Old"))

        applied = self.engine.apply_best_rule(
            txn, [UserRule(payee="Netflix", category="Subscriptions")], force=True
        )

        self.assertTrue(applied)
        self.assertEqual(txn.classification_reason, "Payee Rule: Netflix")

    def test_reapplying_rule_is_stable(self):
        """Test applying the same rule twice gives the same result."""
        rule = UserRule(payee="Netflix", category="Subscriptions")
        txn = make_txn("t1", "NETFLIX.COM", "-15.49")

        self.assertTrue(self.engine.apply_best_rule(txn, [rule]))
        self.assertTrue(self.engine.apply_best_rule(txn, [rule]))
        self.assertEqual(txn.category, "Subscriptions")


class TestBatchClassification(unittest.TestCase):
    """Test whole-batch classification."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = RuleEngine()

    def test_transfer_pair(self):
        """Test the cross-account transfer scenario."""
        out = make_txn("out", "ONLINE TRANSFER TO SAVINGS", "-100.00", account_id="A", day=0)
        inc = make_txn("in", "ONLINE TRANSFER FROM CHECKING", "100.00", account_id="B", day=2)

        result = self.engine.classify_all([out, inc])

        self.assertEqual(result.transfers_matched, 1)
        self.assertEqual(out.matched_transfer_id, "in")
        self.assertEqual(inc.matched_transfer_id, "out")
        self.assertEqual(out.classification_reason, "Auto-Transfer")
        self.assertEqual(inc.classification_reason, "Auto-Transfer")
        self.assertEqual(result.priorities["out"], ClassificationPriority.AUTO_TRANSFER)
        self.assertEqual(result.priorities["in"], ClassificationPriority.AUTO_TRANSFER)

    def test_transfer_beats_cc_phrase(self):
        """Test a card payment with a matching card-side credit is a transfer."""
        out = make_txn("out", "CREDIT CARD PAYMENT", "-500.00", account_id="checking", day=0)
        inc = make_txn("in", "PAYMENT RECEIVED THANK YOU", "500.00", account_id="card", day=1)

        self.engine.classify_all([out, inc])

        self.assertEqual(out.classification_reason, "Auto-Transfer")
        self.assertEqual(inc.classification_reason, "Auto-Transfer")

    def test_whole_foods_categorized(self):
        """Test the grocery scenario through the full pipeline."""
        txn = make_txn("wf", "WHOLE FOODS #123", "-42.10")

        result = self.engine.classify_all([txn])

        self.assertEqual(txn.category, "Groceries")
        self.assertEqual(txn.classification_reason, "Pattern: Whole Foods")
        self.assertEqual(result.categorized, 1)
        self.assertEqual(result.priorities["wf"], ClassificationPriority.PATTERN_INCOME)

    def test_category_pass_can_be_disabled(self):
        """Test the merchant category pass honours the batch option."""
        config = copy.deepcopy(CLASSIFICATION_CONFIG)
        config["batch"]["categorize_spending"] = False
        engine = RuleEngine(config=config)
        txn = make_txn("wf", "WHOLE FOODS #123", "-42.10")

        result = engine.classify_all([txn])

        self.assertEqual(txn.category, "Expense")
        self.assertEqual(result.categorized, 0)

    def test_custom_transfer_label_not_recategorized(self):
        """Test linked legs and CC payments keep a custom transfer label through the category pass."""
        config = copy.deepcopy(CLASSIFICATION_CONFIG)
        config["labels"]["transfer"] = "Internal Transfer"
        engine = RuleEngine(config=config)
        out = make_txn("o", "SHELL SAVINGS MOVE", "-100.00", account_id="A", day=0)
        inc = make_txn("i", "SAVINGS DEPOSIT", "100.00", account_id="B", day=1)
        cc = make_txn("cc", "SHELL CARD PAYMENT", "-60.00", account_id="A", day=0)

        result = engine.classify_all([out, inc, cc])

        for txn in (out, inc):
            self.assertEqual(txn.category, "Internal Transfer")
            self.assertEqual(txn.classification_reason, "Auto-Transfer")
            self.assertEqual(result.priorities[txn.id], ClassificationPriority.AUTO_TRANSFER)
        self.assertEqual(cc.category, "Internal Transfer")
        self.assertEqual(cc.classification_reason, "Auto-CC Payment")
        self.assertEqual(result.categorized, 0)

    def test_rule_snapshot_used_for_whole_batch(self):
        """Test an explicit rule list replaces the store for one run."""
        txn = make_txn("n", "NETFLIX.COM", "-15.49")

        self.engine.classify_all([txn], rules=[UserRule(payee="Netflix", category="Subscriptions")])

        self.assertEqual(txn.classification_reason, "Payee Rule: Netflix")

    def test_count_by_priority(self):
        """Test the batch result summary."""
        txns = [
            make_txn("a", "ACME PAYROLL", "2500.00"),
            make_txn("b", "XQZ 0000", "-3.00"),
            make_txn("c", "XQZ 0001", "-4.00"),
        ]

        result = self.engine.classify_all(txns)

        self.assertEqual(result.count_by_priority(), {
            ClassificationPriority.PATTERN_INCOME: 1,
            ClassificationPriority.DEFAULT: 2,
        })

    def test_classify_transactions_entry_point(self):
        """Test the package-level entry point."""
        txn = make_txn("wf", "WHOLE FOODS #123", "-42.10")
        netflix = make_txn("n", "NETFLIX.COM", "-15.49")

        result = classify_transactions(
            [txn, netflix], rules=[UserRule(payee="Netflix", category="Subscriptions")]
        )

        self.assertEqual(txn.category, "Groceries")
        self.assertEqual(netflix.category, "Subscriptions")
        self.assertEqual(result.priorities["n"], ClassificationPriority.PAYEE_RULE)


class TestRerunGuarantees(unittest.TestCase):
    """Test idempotence and priority monotonicity."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = RuleEngine(UserRuleStore([UserRule(payee="Netflix", category="Subscriptions")]))

    def build_batch(self):
        manual = make_txn("manual", "ACME PAYROLL", "100.00", account_id="C")
        manual.classify("Gifts", Classification.manual())
        manual_cc = make_txn("manual_cc", "CREDIT CARD PAYMENT", "-50.00", account_id="C")
        manual_cc.classify("Rent", Classification.manual())

        return [
            make_txn("out", "ONLINE TRANSFER TO SAVINGS", "-100.00", account_id="A", day=0),
            make_txn("in", "ONLINE TRANSFER FROM CHECKING", "100.00", account_id="B", day=2),
            make_txn("pay", "ACME CORP DIRECT DEPOSIT PAYROLL", "2500.00", account_id="A"),
            make_txn("wf", "WHOLE FOODS #123", "-42.10", account_id="A"),
            make_txn("cc", "CHASE CREDIT CARD PAYMENT", "-321.00", account_id="A"),
            make_txn("unknown", "XQZ 0000", "-9.00", account_id="A"),
            make_txn("netflix", "NETFLIX.COM", "-15.49", account_id="A"),
            make_txn("refund", "AMAZON REFUND", "19.99", account_id="A"),
            manual,
            manual_cc,
        ]

    def test_idempotent(self):
        """Test a second run changes nothing."""
        txns = self.build_batch()

        self.engine.classify_all(txns)
        first = snapshot(txns)
        second_result = self.engine.classify_all(txns)

        self.assertEqual(snapshot(txns), first)
        self.assertEqual(second_result.transfers_matched, 0)

    def test_expected_labels(self):
        """Test every record of the mixed batch lands where expected."""
        txns = {txn.id: txn for txn in self.build_batch()}

        self.engine.classify_all(list(txns.values()))

        self.assertEqual(txns["out"].category, "Transfer")
        self.assertEqual(txns["pay"].classification_reason, "Pattern: Payroll")
        self.assertEqual(txns["wf"].category, "Groceries")
        self.assertEqual(txns["cc"].classification_reason, "Auto-CC Payment")
        self.assertEqual(txns["unknown"].category, "Expense")
        self.assertEqual(txns["netflix"].category, "Subscriptions")
        self.assertEqual(txns["refund"].classification_reason, "Pattern: Refund")
        self.assertEqual(txns["manual"].category, "Gifts")
        self.assertEqual(txns["manual_cc"].category, "Rent")

    def test_priority_never_decreases(self):
        """Test no record loses priority across runs."""
        txns = self.build_batch()
        before = {txn.id: txn.priority for txn in txns}

        self.engine.classify_all(txns)
        after_first = {txn.id: txn.priority for txn in txns}
        self.engine.classify_all(txns)

        for txn in txns:
            self.assertGreaterEqual(after_first[txn.id], before[txn.id], txn.id)
            self.assertGreaterEqual(txn.priority, after_first[txn.id], txn.id)

    def test_lower_priority_labels_not_downgraded(self):
        """Test pre-existing automatic labels survive when detectors no longer fire."""
        pattern = make_txn("p", "XQZ 0000", "10.00")
        pattern.classify("Income", Classification.pattern("Refund"))
        cc = make_txn("cc", "XQZ 0001", "-50.00")
        cc.classify("Transfer", Classification.auto_cc_payment())

        RuleEngine().classify_all([pattern, cc])

        self.assertEqual(pattern.classification_reason, "Pattern: Refund")
        self.assertEqual(cc.classification_reason, "Auto-CC Payment")


class TestUserCorrections(unittest.TestCase):
    """Test rule synthesis from corrections."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = UserRuleStore()
        self.engine = RuleEngine(self.store)

    def test_create_rule_uses_payee(self):
        """Test the payee is preferred."""
        txn = make_txn("t1", "POS 1234", "-5.00", payee="Blue Bottle")

        rule = self.engine.create_rule(txn, "Dining")

        self.assertEqual(rule.payee, "Blue Bottle")
        self.assertEqual(rule.category, "Dining")
        self.assertEqual(rule.classification_type, "expense")
        self.assertEqual(len(self.store), 0)

    def test_create_rule_uses_first_description_word(self):
        """Test the first description word when there is no payee."""
        rule = self.engine.create_rule(make_txn("t1", "STARBUCKS STORE 123", "-5.00"), "Dining")

        self.assertEqual(rule.payee, "STARBUCKS")

    def test_create_rule_short_word(self):
        """Test no rule when the first word is too short."""
        self.assertIsNone(self.engine.create_rule(make_txn("t1", "AB 123", "-5.00"), "Dining"))
        self.assertIsNone(self.engine.create_rule(make_txn("t2", "", "-5.00"), "Dining"))

    def test_apply_correction(self):
        """Test a one-off correction labels the transaction manual."""
        txn = make_txn("t1", "XQZ 0000", "-5.00")

        self.assertIsNone(self.engine.apply_correction(txn, "Gifts"))
        self.assertEqual(txn.category, "Gifts")
        self.assertEqual(txn.classification_reason, "Manual")
        self.assertEqual(len(self.store), 0)

    def test_apply_correction_to_payee(self):
        """Test a correction for all transactions of a payee creates then updates one rule."""
        first = make_txn("t1", "SQ *BLUE BOTTLE", "-5.00", payee="Blue Bottle")
        second = make_txn("t2", "SQ *BLUE BOTTLE", "-6.00", payee="Blue Bottle")

        rule = self.engine.apply_correction(first, "Dining", apply_to_payee=True)
        updated = self.engine.apply_correction(second, "Coffee", apply_to_payee=True)

        self.assertIs(rule, updated)
        self.assertEqual(len(self.store), 1)
        self.assertEqual(rule.category, "Coffee")

    def test_apply_correction_ignored(self):
        """Test an ignored correction flags the transaction."""
        txn = make_txn("t1", "VENMO CASHOUT", "40.00")

        self.engine.apply_correction(txn, "Ignored", "ignored")

        self.assertTrue(txn.is_ignored)

    def test_apply_correction_clears_ignored(self):
        """Test correcting an ignored transaction back to expense un-ignores it."""
        txn = make_txn("t1", "VENMO CASHOUT", "-40.00")

        self.engine.apply_correction(txn, "Other", "ignored")
        self.engine.apply_correction(txn, "Groceries", "expense")

        self.assertFalse(txn.is_ignored)
        self.assertEqual(txn.category, "Groceries")
        self.assertEqual(txn.classification_reason, "Manual")
        self.assertEqual(txn.classification_type, ClassificationType.EXPENSE)

    def test_apply_correction_unknown_type(self):
        """Test an unknown type fails fast."""
        with self.assertRaises(ValueError):
            self.engine.apply_correction(make_txn("t1", "X", "-1.00"), "Gifts", "savings")


class TestEngineHelpers(unittest.TestCase):
    """Test statistics helpers and configuration validation."""

    def test_count_by_reason(self):
        """Test counting records per reason."""
        txns = [make_txn("a", "XQZ 0000", "-1.00"), make_txn("b", "XQZ 0001", "-2.00")]
        txns[0].classify("Gifts", Classification.manual())

        self.assertEqual(RuleEngine.count_by_reason(txns), {"Manual": 1, "Default": 1})

    def test_priority_helpers(self):
        """Test can_override and priority_of."""
        txn = make_txn("a", "XQZ 0000", "-1.00")
        txn.classify("Gifts", Classification.manual())

        self.assertEqual(RuleEngine.priority_of(txn), ClassificationPriority.MANUAL)
        self.assertTrue(RuleEngine.can_override("Payee Rule: X", "Manual"))
        self.assertFalse(RuleEngine.can_override("Auto-Transfer", "Manual"))

    def test_count_matches(self):
        """Test counting rule matches."""
        rule = UserRule(payee="Netflix", category="Subscriptions")
        txns = [make_txn("a", "NETFLIX.COM", "-1.00"), make_txn("b", "HULU", "-1.00")]

        self.assertEqual(RuleEngine.count_matches(rule, txns), 1)

    def test_uncategorized(self):
        """Test listing outgoing records without a category."""
        txns = [make_txn("a", "XQZ 0000", "-1.00"), make_txn("b", "XQZ 0001", "1.00")]

        self.assertEqual([t.id for t in RuleEngine().uncategorized(txns)], ["a"])

    def test_invalid_config(self):
        """Test a negative transfer window is rejected at construction."""
        config = copy.deepcopy(CLASSIFICATION_CONFIG)
        config["transfers"]["max_days_difference"] = -1

        with self.assertRaises(ValueError):
            RuleEngine(config=config)

    def test_partial_config_rejected(self):
        """Test a config missing whole sections raises ValueError, not KeyError."""
        config = copy.deepcopy(CLASSIFICATION_CONFIG)
        del config["labels"]

        with self.assertRaises(ValueError):
            RuleEngine(config=config)

        config = copy.deepcopy(CLASSIFICATION_CONFIG)
        del config["batch"]

        with self.assertRaises(ValueError):
            RuleEngine(config=config)

    def test_boolean_window_rejected(self):
        """Test booleans are not accepted as a day count."""
        config = copy.deepcopy(CLASSIFICATION_CONFIG)
        config["transfers"]["max_days_difference"] = True

        with self.assertRaises(ValueError):
            RuleEngine(config=config)

    def test_empty_label_rejected(self):
        """Test labels must be non-empty strings."""
        config = copy.deepcopy(CLASSIFICATION_CONFIG)
        config["labels"]["transfer"] = ""

        with self.assertRaises(ValueError):
            RuleEngine(config=config)


if __name__ == "__main__":
    unittest.main()
