import pytest

from tailor_payroll.errors import EntryValidationError, PhotoRejected
from tailor_payroll.payroll import (
    MSG_DATE,
    MSG_ITEMS,
    MSG_PRICE,
    MSG_WORKER_NAME,
    DailyEntry,
    PaymentStatus,
    WorkerProfile,
    WorkerSummary,
    check_photo,
    confirm_payment,
    current_month,
    delete_profile,
    ensure_profile,
    entry_month,
    initials,
    known_worker_names,
    month_statuses,
    parse_amounts,
    photo_data_url,
    recompute_summary,
    unmark_payment,
    upsert_profile,
    validate_entry,
)


def raw(name, items, salary):
    return WorkerSummary(worker_name=name, total_items=items, total_salary=salary)


# ------------ summary reconciliation ------------------------------------------
class TestRecomputeSummary:
    def test_final_salary_adds_base_and_subtracts_advance(self):
        out = recompute_summary([raw("Ali", 10, 50)], {"Ali": 100}, {"Ali": 30}, {})
        assert out[0].final_salary == 120
        assert out[0].base_salary == 100
        assert out[0].advance == 30

    def test_missing_adjustments_default_to_zero(self):
        out = recompute_summary([raw("Sara", 5, 25)], {"Ali": 100}, {}, {})
        assert out[0].base_salary == 0
        assert out[0].advance == 0
        assert out[0].final_salary == 25

    def test_negative_final_salary_is_kept(self):
        out = recompute_summary([raw("Omar", 2, 10)], {}, {"Omar": 75}, {})
        assert out[0].final_salary == -65

    def test_formula_holds_for_every_row(self):
        rows = [raw("A", 1, 10.5), raw("B", 0, 0), raw("C", 7, 99.25)]
        base = {"A": 200, "C": 15.5}
        adv = {"B": 40, "C": 120}
        out = recompute_summary(rows, base, adv, {})
        for s, d in zip(rows, out):
            assert d.final_salary == s.total_salary + base.get(s.worker_name, 0) - adv.get(s.worker_name, 0)

    def test_payment_status_only_for_paid_workers(self):
        paid = {"Ali": PaymentStatus(paid_date="2024-05-31", notes="cash")}
        out = recompute_summary([raw("Ali", 1, 5), raw("Sara", 1, 5)], {}, {}, paid)
        assert out[0].payment_status == paid["Ali"]
        assert out[0].is_paid
        assert out[1].payment_status is None
        assert "paymentStatus" not in out[1].to_dict()

    def test_order_follows_remote_rows(self):
        rows = [raw("Zed", 1, 1), raw("Ali", 1, 1), raw("Mona", 1, 1)]
        out = recompute_summary(rows, {}, {}, {})
        assert [s.worker_name for s in out] == ["Zed", "Ali", "Mona"]

    def test_names_are_not_normalised(self):
        out = recompute_summary([raw("ali", 1, 10)], {"Ali": 100}, {}, {})
        assert out[0].base_salary == 0

    def test_pure_and_idempotent(self):
        rows = [raw("Ali", 10, 50)]
        base, adv = {"Ali": 100}, {"Ali": 30}
        first = recompute_summary(rows, base, adv, {})
        second = recompute_summary(rows, base, adv, {})
        assert first == second
        assert rows[0].final_salary is None
        assert base == {"Ali": 100} and adv == {"Ali": 30}


def test_summary_from_row_coerces_strings():
    s = WorkerSummary.from_row({"workerName": "Ali", "totalItems": "12", "totalSalary": "60.5"})
    assert s.total_items == 12
    assert s.total_salary == 60.5


def test_daily_entry_from_row_computes_missing_total():
    e = DailyEntry.from_row({"id": 3, "workerName": "Ali", "date": "2024-05-02T00:00:00.000Z", "items": 4, "price": 2.5})
    assert e.date == "2024-05-02"
    assert e.daily_total == 10


# ------------ entry validation ------------------------------------------------
class TestValidateEntry:
    def test_valid_entry(self):
        e = validate_entry("  Ali ", "2024-05-17", "10", "2.5")
        assert e.worker_name == "Ali"
        assert e.items == 10
        assert e.price == 2.5
        assert e.daily_total == 25

    def test_zero_price_allowed(self):
        assert validate_entry("Ali", "2024-05-17", 3, 0).daily_total == 0

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name(self, name):
        with pytest.raises(EntryValidationError) as exc:
            validate_entry(name, "2024-05-17", 1, 1)
        assert exc.value.field == "workerName"
        assert exc.value.message == MSG_WORKER_NAME

    @pytest.mark.parametrize("d", ["", None, "17/05/2024"])
    def test_bad_date(self, d):
        with pytest.raises(EntryValidationError) as exc:
            validate_entry("Ali", d, 1, 1)
        assert exc.value.message == MSG_DATE

    @pytest.mark.parametrize("items", [0, -1, "", "abc", None, "nan"])
    def test_items_must_be_positive(self, items):
        with pytest.raises(EntryValidationError) as exc:
            validate_entry("Ali", "2024-05-17", items, 1)
        assert exc.value.field == "items"
        assert exc.value.message == MSG_ITEMS

    @pytest.mark.parametrize("price", [-0.01, "", "x", None])
    def test_price_must_not_be_negative(self, price):
        with pytest.raises(EntryValidationError) as exc:
            validate_entry("Ali", "2024-05-17", 1, price)
        assert exc.value.message == MSG_PRICE

    def test_checks_run_in_order(self):
        with pytest.raises(EntryValidationError) as exc:
            validate_entry("", "", 0, -1)
        assert exc.value.field == "workerName"
        with pytest.raises(EntryValidationError) as exc:
            validate_entry("Ali", "", 0, -1)
        assert exc.value.field == "date"
        with pytest.raises(EntryValidationError) as exc:
            validate_entry("Ali", "2024-05-17", 0, -1)
        assert exc.value.field == "items"


def test_entry_month_is_date_prefix():
    assert entry_month("2023-12-31") == "2023-12"


def test_current_month_format():
    from datetime import date
    assert current_month(date(2024, 3, 9)) == "2024-03"


# ------------ payment status --------------------------------------------------
class TestPaymentStatus:
    def test_mark_paid_stamps_today(self):
        statuses, existed = confirm_payment({}, "2024-05", "Ali", "cash", today="2024-05-31")
        assert not existed
        assert statuses == {"2024-05": {"Ali": PaymentStatus("2024-05-31", "cash")}}

    def test_reconfirm_keeps_paid_date(self):
        statuses, _ = confirm_payment({}, "2024-05", "Ali", "first", today="2024-05-31")
        statuses, existed = confirm_payment(statuses, "2024-05", "Ali", "second", today="2024-06-02")
        assert existed
        assert statuses["2024-05"]["Ali"] == PaymentStatus("2024-05-31", "second")

    def test_unmark_then_remark_gets_fresh_date(self):
        statuses, _ = confirm_payment({}, "2024-05", "Ali", "n", today="2024-05-31")
        statuses = unmark_payment(statuses, "2024-05", "Ali")
        assert "Ali" not in statuses["2024-05"]
        statuses, existed = confirm_payment(statuses, "2024-05", "Ali", "", today="2024-06-03")
        assert not existed
        assert statuses["2024-05"]["Ali"] == PaymentStatus("2024-06-03", "")

    def test_months_are_independent(self):
        statuses, _ = confirm_payment({}, "2024-05", "Ali", "", today="2024-05-31")
        assert month_statuses(statuses, "2024-06") == {}
        statuses = unmark_payment(statuses, "2024-06", "Ali")
        assert "Ali" in statuses["2024-05"]

    def test_inputs_are_not_mutated(self):
        original = {"2024-05": {"Ali": PaymentStatus("2024-05-01", "")}}
        confirm_payment(original, "2024-05", "Sara", "", today="2024-05-31")
        unmark_payment(original, "2024-05", "Ali")
        assert original == {"2024-05": {"Ali": PaymentStatus("2024-05-01", "")}}


# ------------ worker profiles -------------------------------------------------
class TestProfiles:
    def test_ensure_adds_once(self):
        profiles, added = ensure_profile([], "Ali")
        assert added and profiles == [WorkerProfile("Ali")]
        profiles, added = ensure_profile(profiles, "Ali")
        assert not added and len(profiles) == 1

    def test_ensure_is_case_sensitive(self):
        profiles, added = ensure_profile([WorkerProfile("Ali")], "ali")
        assert added and len(profiles) == 2

    def test_upsert_sets_photo(self):
        profiles = upsert_profile([WorkerProfile("Ali")], WorkerProfile("Ali", "data:image/png;base64,AA=="))
        assert profiles == [WorkerProfile("Ali", "data:image/png;base64,AA==")]

    def test_upsert_appends_unknown(self):
        profiles = upsert_profile([WorkerProfile("Ali")], WorkerProfile("Sara"))
        assert [p.name for p in profiles] == ["Ali", "Sara"]

    def test_delete(self):
        assert delete_profile([WorkerProfile("Ali"), WorkerProfile("Sara")], "Ali") == [WorkerProfile("Sara")]

    def test_to_dict_omits_missing_photo(self):
        assert WorkerProfile("Ali").to_dict() == {"name": "Ali"}


@pytest.mark.parametrize(
    "name, expected",
    [("Ali Hassan", "AH"), ("mona", "MO"), ("  a   b  c ", "AB"), ("", "??"), ("   ", "??")],
)
def test_initials(name, expected):
    assert initials(name) == expected


def test_known_worker_names_merges_without_repeats():
    assert known_worker_names(["Ali", "Sara"], [WorkerProfile("Sara"), WorkerProfile("Omar")]) == ["Ali", "Sara", "Omar"]


def test_parse_amounts_defaults_bad_input_to_zero():
    form = {"base__Ali": "150", "base__Sara": "abc"}
    assert parse_amounts(["Ali", "Sara", "Omar"], form, "base__") == {"Ali": 150.0, "Sara": 0.0, "Omar": 0.0}


class TestPhoto:
    def test_rejects_non_image(self):
        with pytest.raises(PhotoRejected):
            check_photo("application/pdf", 10, 1024)

    def test_rejects_oversize(self):
        with pytest.raises(PhotoRejected):
            check_photo("image/png", 2048, 1024)

    def test_accepts_unknown_size(self):
        check_photo("image/jpeg", None, 1024)

    def test_data_url(self):
        assert photo_data_url(b"\x00\x01", "image/png") == "data:image/png;base64,AAE="
