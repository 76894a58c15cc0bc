"""Member record lifecycle: empty -> draft -> locked."""
import random
from unittest.mock import PropertyMock, patch

import pytest

from apps.members.exceptions import DuplicateSlot, MemberLocked, NotFound, ValidationFailed
from apps.members.models import LockState, Member
from apps.members.services import MemberRecordService
from apps.members.validators import MANDATORY_FIELDS, ReasonCode

pytestmark = pytest.mark.django_db


class TestCreateMember:

    def test_new_member_is_empty(self, purchase):
        member = MemberRecordService.create_member(purchase.pk, 'Spouse')
        assert member.lock_state == LockState.EMPTY
        assert member.relation_slot == 'Spouse'
        assert member.card_id is None

    def test_duplicate_slot(self, purchase):
        MemberRecordService.create_member(purchase.pk, 'Self')
        with pytest.raises(DuplicateSlot) as exc:
            MemberRecordService.create_member(purchase.pk, 'Self')
        assert exc.value.as_dict()['code'] == 'duplicate_slot'

    def test_slot_must_belong_to_the_plan(self, purchase):
        with pytest.raises(ValidationFailed) as exc:
            MemberRecordService.create_member(purchase.pk, 'Parent')
        assert exc.value.fields == ['relation_slot']

    def test_unknown_purchase(self, db):
        with pytest.raises(NotFound):
            MemberRecordService.create_member(999999, 'Self')

    def test_create_slot_members_fills_missing_slots_once(self, purchase):
        MemberRecordService.create_member(purchase.pk, 'Spouse')
        created = MemberRecordService.create_slot_members(purchase.pk)
        assert [m.relation_slot for m in created] == ['Self', 'Child1', 'Child2']
        assert MemberRecordService.create_slot_members(purchase.pk) == []

    def test_list_members_follows_slot_order(self, purchase):
        for slot in ['Child2', 'Self', 'Child1', 'Spouse']:
            MemberRecordService.create_member(purchase.pk, slot)
        listed = MemberRecordService.list_members(purchase.pk)
        assert [m.relation_slot for m in listed] == ['Self', 'Spouse', 'Child1', 'Child2']


class TestSaveDraft:

    def test_first_write_moves_to_draft(self, members):
        member = MemberRecordService.save_draft(members['Self'].pk, {'full_name': 'Asha Verma'})
        assert member.lock_state == LockState.DRAFT
        assert member.full_name == 'Asha Verma'

    def test_blank_only_payload_keeps_member_empty(self, members):
        member = MemberRecordService.save_draft(members['Self'].pk, {'height_cm': '', 'nominee_name': ' '})
        assert member.lock_state == LockState.EMPTY
        assert Member.objects.get(pk=member.pk).lock_state == LockState.EMPTY

    def test_overlong_name_is_a_field_error(self, members):
        with pytest.raises(ValidationFailed) as exc:
            MemberRecordService.save_draft(members['Self'].pk, {'full_name': 'A' * 200})
        assert exc.value.fields == ['full_name']
        assert exc.value.errors[0].code == ReasonCode.TOO_LONG
        assert Member.objects.get(pk=members['Self'].pk).full_name == ''

    def test_invalid_field_rejects_whole_payload(self, members):
        with pytest.raises(ValidationFailed) as exc:
            MemberRecordService.save_draft(members['Self'].pk, {
                'full_name': 'Asha Verma',
                'mobile': '5123456789',
            })
        assert exc.value.fields == ['mobile']

        member = Member.objects.get(pk=members['Self'].pk)
        assert member.full_name == ''
        assert member.lock_state == LockState.EMPTY

    def test_pan_is_stored_uppercase(self, members):
        member = MemberRecordService.save_draft(members['Self'].pk, {'pan_number': 'abcde1234f'})
        assert Member.objects.get(pk=member.pk).pan_number == 'ABCDE1234F'

    def test_last_write_wins(self, members):
        pk = members['Spouse'].pk
        MemberRecordService.save_draft(pk, {'city': 'Pune'})
        MemberRecordService.save_draft(pk, {'city': 'Mumbai'})
        assert Member.objects.get(pk=pk).city == 'Mumbai'

    def test_locked_member_rejects_mandatory_fields(self, members, lock_member):
        lock_member(members['Self'])
        with pytest.raises(MemberLocked) as exc:
            MemberRecordService.save_draft(members['Self'].pk, {'email': 'new@example.com'})
        assert exc.value.field == 'email'
        assert Member.objects.get(pk=members['Self'].pk).email == 'asha.verma@example.com'

    def test_locked_member_keeps_optional_fields_editable(self, members, lock_member):
        lock_member(members['Self'])
        member = MemberRecordService.save_draft(members['Self'].pk, {'weight_kg': '60'})
        assert member.lock_state == LockState.LOCKED
        assert str(Member.objects.get(pk=member.pk).weight_kg) == '60.0'

    def test_unknown_member(self, db):
        with pytest.raises(NotFound):
            MemberRecordService.save_draft(424242, {'full_name': 'Asha Verma'})


class TestCommitAndLock:

    def test_valid_member_is_locked(self, members, valid_fields):
        member = MemberRecordService.commit_and_lock(members['Self'].pk, valid_fields)
        assert member.lock_state == LockState.LOCKED
        assert member.locked_at is not None
        assert member.aadhaar_number == '123456789012'
        assert member.pan_number == 'ABCDE1234F'

    def test_draft_values_count_towards_the_lock(self, members, valid_fields):
        pk = members['Spouse'].pk
        first_half = dict(list(valid_fields.items())[:6])
        second_half = dict(list(valid_fields.items())[6:])
        MemberRecordService.save_draft(pk, first_half)
        member = MemberRecordService.commit_and_lock(pk, second_half)
        assert member.full_name == 'Asha Verma'
        assert member.is_locked

    @pytest.mark.parametrize('field', MANDATORY_FIELDS)
    def test_one_invalid_field_blocks_the_lock(self, members, valid_fields, field):
        broken = {**valid_fields, field: ''}
        with pytest.raises(ValidationFailed) as exc:
            MemberRecordService.commit_and_lock(members['Self'].pk, broken)

        assert exc.value.fields == [field]
        assert exc.value.errors[0].code == ReasonCode.REQUIRED
        assert Member.objects.get(pk=members['Self'].pk).lock_state == LockState.EMPTY

    def test_failure_writes_nothing(self, members, valid_fields):
        pk = members['Self'].pk
        MemberRecordService.save_draft(pk, {'city': 'Pune'})
        with pytest.raises(ValidationFailed):
            MemberRecordService.commit_and_lock(pk, {**valid_fields, 'city': 'Nagpur', 'mobile': '5123456789'})

        member = Member.objects.get(pk=pk)
        assert member.city == 'Pune'
        assert member.lock_state == LockState.DRAFT

    def test_overlong_city_blocks_the_lock(self, members, valid_fields):
        with pytest.raises(ValidationFailed) as exc:
            MemberRecordService.commit_and_lock(members['Self'].pk, {**valid_fields, 'city': 'B' * 100})
        assert exc.value.fields == ['city']
        assert Member.objects.get(pk=members['Self'].pk).lock_state == LockState.EMPTY

    def test_unknown_fields_are_reported(self, members, valid_fields):
        with pytest.raises(ValidationFailed) as exc:
            MemberRecordService.commit_and_lock(members['Self'].pk, {**valid_fields, 'relation_slot': 'Spouse'})
        assert exc.value.fields == ['relation_slot']

    def test_second_lock_is_rejected(self, members, valid_fields):
        MemberRecordService.commit_and_lock(members['Self'].pk, valid_fields)
        with pytest.raises(MemberLocked):
            MemberRecordService.commit_and_lock(members['Self'].pk, {**valid_fields, 'city': 'Mumbai'})
        assert Member.objects.get(pk=members['Self'].pk).city == 'Pune'

    def test_lock_is_compare_and_swap(self, members, valid_fields):
        """A caller that read the member before another caller locked it still loses"""
        pk = members['Self'].pk
        MemberRecordService.commit_and_lock(pk, valid_fields)

        with patch.object(Member, 'is_locked', new_callable=PropertyMock, return_value=False):
            with pytest.raises(MemberLocked):
                MemberRecordService.commit_and_lock(pk, {**valid_fields, 'full_name': 'Someone Else'})

        assert Member.objects.get(pk=pk).full_name == 'Asha Verma'

    def test_unknown_member(self, db, valid_fields):
        with pytest.raises(NotFound):
            MemberRecordService.commit_and_lock(424242, valid_fields)


def test_lock_state_never_leaves_locked(members, valid_fields):
    """Random draft and lock calls only ever move empty -> draft -> locked"""
    rng = random.Random(20240115)
    order = [LockState.EMPTY, LockState.DRAFT, LockState.LOCKED]
    candidates = [
        {'full_name': 'Ravi Kumar'},
        {'mobile': '5123456789'},
        {'weight_kg': '72'},
        {'city': 'Chennai'},
        {},
    ]

    for member in members.values():
        previous = member.lock_state
        for _ in range(25):
            try:
                if rng.random() < 0.3:
                    payload = dict(valid_fields) if rng.random() < 0.5 else {'full_name': 'R'}
                    MemberRecordService.commit_and_lock(member.pk, payload)
                else:
                    MemberRecordService.save_draft(member.pk, rng.choice(candidates))
            except (ValidationFailed, MemberLocked):
                pass

            current = Member.objects.get(pk=member.pk).lock_state
            assert order.index(current) >= order.index(previous)
            previous = current
