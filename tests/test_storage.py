import json

from tailor_payroll.extensions import db
from tailor_payroll.models import StoredValue, User
from tailor_payroll.payroll import PaymentStatus, WorkerProfile
from tailor_payroll.storage import (
    KEY_ADVANCES,
    KEY_BASE_SALARIES,
    KEY_PAYMENT_STATUSES,
    KEY_SCRIPT_URL,
    KEY_WORKER_PROFILES,
    LocalStore,
)

from .conftest import SCRIPT_URL


def raw_json(owner_id, key):
    row = StoredValue.query.filter_by(owner_id=owner_id, key=key).first()
    return json.loads(row.value_json) if row else None


def test_missing_keys_give_defaults(store):
    assert store.load("nothing-here", {"a": 1}) == {"a": 1}
    config = store.load_config()
    assert config.script_url is None
    assert config.base_salaries == {}
    assert config.advances == {}
    assert store.load_profiles() == []
    assert store.load_payment_statuses() == {}


def test_default_script_url_from_config(app, store):
    app.config["DEFAULT_SCRIPT_URL"] = SCRIPT_URL
    assert store.load_config().script_url == SCRIPT_URL
    store.save_script_url("https://script.google.com/macros/s/OTHER/exec")
    assert store.load_config().script_url.endswith("OTHER/exec")


def test_save_replaces_whole_value(store):
    store.save_base_salaries({"Ali": 100, "Sara": 80})
    store.save_base_salaries({"Ali": 120})
    assert store.load_config().base_salaries == {"Ali": 120}
    assert StoredValue.query.filter_by(owner_id=store.owner_id, key=KEY_BASE_SALARIES).count() == 1


def test_json_shapes_match_browser_storage(store):
    store.save_script_url(SCRIPT_URL)
    store.save_advances({"Ali": 30})
    store.save_profiles([WorkerProfile("Ali"), WorkerProfile("Sara", "data:image/png;base64,AA==")])
    store.save_payment_statuses({"2024-05": {"Ali": PaymentStatus("2024-05-31", "cash")}})

    assert raw_json(store.owner_id, KEY_SCRIPT_URL) == SCRIPT_URL
    assert raw_json(store.owner_id, KEY_ADVANCES) == {"Ali": 30}
    assert raw_json(store.owner_id, KEY_WORKER_PROFILES) == [
        {"name": "Ali"},
        {"name": "Sara", "photo": "data:image/png;base64,AA=="},
    ]
    assert raw_json(store.owner_id, KEY_PAYMENT_STATUSES) == {
        "2024-05": {"Ali": {"paidDate": "2024-05-31", "notes": "cash"}}
    }


def test_reads_existing_browser_data(store):
    db.session.add(StoredValue(
        owner_id=store.owner_id,
        key=KEY_PAYMENT_STATUSES,
        value_json='{"2024-04": {"Mona": {"paidDate": "2024-04-30", "notes": ""}}}',
    ))
    db.session.add(StoredValue(owner_id=store.owner_id, key=KEY_BASE_SALARIES, value_json='{"Mona": "150"}'))
    db.session.commit()
    assert store.load_payment_statuses() == {"2024-04": {"Mona": PaymentStatus("2024-04-30", "")}}
    assert store.load_config().base_salaries == {"Mona": 150.0}


def test_unreadable_json_falls_back(store):
    db.session.add(StoredValue(owner_id=store.owner_id, key=KEY_WORKER_PROFILES, value_json="{not json"))
    db.session.commit()
    assert store.load_profiles() == []


def test_clear_and_remove(store):
    store.save_script_url(SCRIPT_URL)
    store.save_advances({"Ali": 1})
    store.remove(KEY_ADVANCES)
    assert store.load_config().advances == {}
    store.save_profiles([WorkerProfile("Ali")])
    store.clear()
    assert store.load_config().script_url is None
    assert store.load_profiles() == []


def test_values_are_scoped_per_operator(store):
    other = User(username="clerk")
    other.set_password("x")
    db.session.add(other)
    db.session.commit()
    store.save_advances({"Ali": 5})
    assert LocalStore(other.id).load_config().advances == {}


def test_transcripts_are_per_month_and_cleared(store):
    chat = [{"role": "model", "content": "Hello!"}, {"role": "user", "content": "total?"}]
    store.save_transcript("2024-05", chat)
    store.save_transcript("2024-06", chat[:1])
    assert store.load_transcript("2024-05") == chat
    store.remove_transcript("2024-06")
    assert store.load_transcript("2024-06") == []
    assert store.load_transcript("2024-05") == chat
    store.clear()
    assert store.load_transcript("2024-05") == []
