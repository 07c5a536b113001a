from contacts_sync.merge import compare_records, reconcile
from contacts_sync.models import ContactRecord, Insert, NoOp, SyncOutcome, Update
from contacts_sync.store import InMemoryContactStore
from contacts_sync.sync_contacts import apply_actions


def _contact(**overrides):
    payload = dict(
        contact_id=0,
        name="Ada Lovelace",
        phone_number="+1 (234) 567-8901",
        phone_label="Mobile",
        photo_uri=None,
    )
    payload.update(overrides)
    return ContactRecord(**payload)


def test_reconcile_inserts_into_empty_store():
    ada = _contact()
    actions, outcome = reconcile([ada], [])
    assert actions == [Insert(record=ada)]
    assert outcome == SyncOutcome(inserted=1, updated=0)
    assert outcome.has_changes is True


def test_reconcile_updates_changed_name():
    stored = _contact(contact_id=7, phone_number="234-567-8901")
    renamed = _contact(name="Ada King")
    actions, outcome = reconcile([renamed], [stored])
    assert len(actions) == 1
    update = actions[0]
    assert isinstance(update, Update)
    assert update.contact_id == 7
    assert update.name == "Ada King"
    assert update.record.phone_number == "234-567-8901"
    assert (outcome.inserted, outcome.updated, outcome.has_changes) == (0, 1, True)


def test_reconcile_noop_when_nothing_changed():
    stored = _contact(contact_id=3, photo_uri="content://photo/3")
    fresh = _contact(photo_uri=None)
    actions, outcome = reconcile([fresh], [stored])
    assert actions == [NoOp(record=fresh, contact_id=3)]
    assert outcome.has_changes is False
    assert outcome.summary() == "No changes needed"


def test_reconcile_keeps_stored_photo_when_source_has_none():
    stored = _contact(contact_id=3, photo_uri="content://photo/3")
    fresh = _contact(phone_label="Work", photo_uri=None)
    actions, _ = reconcile([fresh], [stored])
    assert isinstance(actions[0], Update)
    assert actions[0].photo_uri == "content://photo/3"
    assert actions[0].phone_label == "Work"


def test_reconcile_updates_new_photo():
    stored = _contact(contact_id=3)
    fresh = _contact(photo_uri="content://photo/9")
    changes = compare_records(stored, fresh)
    assert (changes.name, changes.label, changes.photo) == (False, False, True)
    actions, outcome = reconcile([fresh], [stored])
    assert actions[0].photo_uri == "content://photo/9"
    assert outcome.updated == 1


def test_reconcile_is_idempotent_after_applying_actions():
    store = InMemoryContactStore([_contact(contact_id=1, name="Old Name")])
    source = [
        _contact(name="New Name"),
        _contact(name="Grace Hopper", phone_number="+44 20 7946 0958", phone_label="Work"),
    ]
    actions, outcome = reconcile(source, store.list_all())
    assert (outcome.inserted, outcome.updated) == (1, 1)
    apply_actions(store, actions)

    actions, outcome = reconcile(source, store.list_all())
    assert all(isinstance(action, NoOp) for action in actions)
    assert outcome == SyncOutcome(0, 0)
    assert outcome.has_changes is False


def test_repeated_number_in_one_run_inserts_once():
    first = _contact(name="Ada", phone_number="1-234-567-8901")
    second = _contact(name="Ada L.", phone_number="(234) 567 8901", photo_uri="content://p/1")
    actions, outcome = reconcile([first, second], [])
    assert outcome == SyncOutcome(inserted=1, updated=0)
    assert isinstance(actions[0], Insert)
    assert isinstance(actions[1], NoOp)
    merged = actions[0].record
    assert merged.name == "Ada L."
    assert merged.phone_number == "1-234-567-8901"
    assert merged.photo_uri == "content://p/1"


def test_repeated_number_in_one_run_updates_once_and_stays_idempotent():
    store = InMemoryContactStore([_contact(contact_id=4, name="Ada")])
    source = [_contact(name="Ada A."), _contact(name="Ada B.")]
    actions, outcome = reconcile(source, store.list_all())
    assert outcome.updated == 1
    assert isinstance(actions[0], Update)
    assert actions[0].name == "Ada B."
    assert isinstance(actions[1], NoOp)

    apply_actions(store, actions)
    _, outcome = reconcile(source, store.list_all())
    assert outcome.has_changes is False


def test_repeat_that_restores_stored_values_yields_noop():
    store = [_contact(contact_id=4, name="Ada")]
    source = [_contact(name="Someone Else"), _contact(name="Ada")]
    actions, outcome = reconcile(source, store)
    assert outcome.has_changes is False
    assert actions == [NoOp(record=source[0], contact_id=4), NoOp(record=source[1], contact_id=4)]


def test_duplicate_stored_keys_last_one_wins():
    older = _contact(contact_id=1, name="Ada")
    newer = _contact(contact_id=2, name="Ada", phone_number="12345678901")
    actions, _ = reconcile([_contact(name="Ada K.")], [older, newer])
    assert actions[0].contact_id == 2


def test_outcome_summary_text():
    assert SyncOutcome(2, 1).summary() == "2 new, 1 updated"
    assert SyncOutcome(0, 0, failed=1).summary() == "No changes needed, 1 failed"
