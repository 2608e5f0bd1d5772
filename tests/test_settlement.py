import pytest

from scolarite.api.v1.payments.settlement import (
    amount_paid,
    amount_paid_for_installment,
    get_student_statement,
    installment_balance,
    list_outstanding_balances,
    remaining,
)
from scolarite.core.enums import InstallmentStatus
from scolarite.core.exceptions import NotFound
from scolarite.db.store import PAYMENTS, RecordStore


async def _pay(store: RecordStore, student_id: str, amount: int, type: str = "scolarite", ordinal=None) -> None:
    await store.create(
        PAYMENTS,
        {"student_id": student_id, "amount": amount, "type": type, "installment_ordinal": ordinal},
    )


@pytest.mark.asyncio
async def test_amount_paid_total_and_by_type(store: RecordStore, seed) -> None:
    student = await seed()
    sid = student["id"]
    await _pay(store, sid, 35000, "inscription")
    await _pay(store, sid, 5000, "scolarite", 2)
    await _pay(store, sid, 3000, "cantine")
    await _pay(store, "someone-else", 99999, "scolarite", 2)

    assert await amount_paid(store, sid) == 43000
    assert await amount_paid(store, sid, "scolarite") == 5000
    assert await amount_paid(store, sid, "cantine") == 3000
    assert await amount_paid(store, sid, "transport") == 0


@pytest.mark.asyncio
async def test_installment_one_unions_registration_and_tagged_tuition(store: RecordStore, seed) -> None:
    student = await seed()
    sid = student["id"]
    await _pay(store, sid, 20000, "inscription")
    await _pay(store, sid, 5000, "scolarite", 1)

    assert await amount_paid_for_installment(store, sid, 1) == 25000
    assert await remaining(store, sid, 1) == 10000


@pytest.mark.asyncio
async def test_registration_and_ordinal_one_count_the_same(store: RecordStore, seed) -> None:
    first = await seed()
    second = await seed(installments=None, matricule="250002")
    await _pay(store, first["id"], 12000, "inscription")
    await _pay(store, second["id"], 12000, "scolarite", 1)

    assert await amount_paid_for_installment(store, first["id"], 1) == 12000
    assert await amount_paid_for_installment(store, second["id"], 1) == 12000


@pytest.mark.asyncio
async def test_untagged_tuition_counts_only_toward_total(store: RecordStore, seed) -> None:
    student = await seed()
    sid = student["id"]
    await _pay(store, sid, 8000, "scolarite")

    for ordinal in (1, 2, 3):
        assert await amount_paid_for_installment(store, sid, ordinal) == 0
    assert await amount_paid(store, sid) == 8000


@pytest.mark.asyncio
async def test_later_installments_need_exact_ordinal(store: RecordStore, seed) -> None:
    student = await seed()
    sid = student["id"]
    await _pay(store, sid, 4000, "scolarite", 2)
    await _pay(store, sid, 1000, "scolarite", 3)
    # A registration payment never counts beyond installment 1
    await _pay(store, sid, 500, "inscription")

    assert await amount_paid_for_installment(store, sid, 2) == 4000
    assert await amount_paid_for_installment(store, sid, 3) == 1000


@pytest.mark.asyncio
async def test_remaining_is_clamped_but_raw_sum_is_not(store: RecordStore, seed) -> None:
    student = await seed()
    sid = student["id"]
    await _pay(store, sid, 25000, "scolarite", 3)

    assert await remaining(store, sid, 3) == 0
    assert await amount_paid_for_installment(store, sid, 3) == 25000
    # Overpayment is not carried over to another installment
    assert await remaining(store, sid, 2) == 15000


@pytest.mark.asyncio
async def test_recomputation_is_stable(store: RecordStore, seed) -> None:
    student = await seed()
    sid = student["id"]
    await _pay(store, sid, 7000, "scolarite", 2)
    first = await amount_paid_for_installment(store, sid, 2)
    second = await amount_paid_for_installment(store, sid, 2)
    assert first == second == 7000


@pytest.mark.asyncio
async def test_remaining_without_schedule_raises(store: RecordStore, seed) -> None:
    student = await seed(installments=None)
    with pytest.raises(NotFound):
        await remaining(store, student["id"], 1)


@pytest.mark.asyncio
async def test_remaining_for_unknown_installment_raises(store: RecordStore, seed) -> None:
    student = await seed()
    with pytest.raises(NotFound):
        await remaining(store, student["id"], 9)


@pytest.mark.asyncio
async def test_installment_balance(store: RecordStore, seed) -> None:
    student = await seed()
    await _pay(store, student["id"], 6000, "scolarite", 2)
    balance = await installment_balance(store, student["id"], 2)
    assert (balance.expected, balance.paid, balance.remaining) == (15000, 6000, 9000)


@pytest.mark.asyncio
async def test_statement(store: RecordStore, seed) -> None:
    student = await seed()
    sid = student["id"]
    await _pay(store, sid, 35000, "inscription")
    await _pay(store, sid, 5000, "scolarite", 2)
    await _pay(store, sid, 2000, "cantine")

    statement = await get_student_statement(store, sid)
    assert statement.level == "CM2"
    assert statement.total_expected == 60000
    assert statement.total_paid == 42000
    assert statement.paid_by_type == {"inscription": 35000, "scolarite": 5000, "cantine": 2000}
    assert [line.status for line in statement.lines] == [
        InstallmentStatus.paid,
        InstallmentStatus.partial,
        InstallmentStatus.unpaid,
    ]
    assert statement.outstanding == 20000
    assert statement.status == InstallmentStatus.partial


@pytest.mark.asyncio
async def test_statement_fully_paid(store: RecordStore, seed) -> None:
    student = await seed(installments=[(1, 1000), (2, 2000)])
    sid = student["id"]
    await _pay(store, sid, 1000, "inscription")
    await _pay(store, sid, 2500, "scolarite", 2)

    statement = await get_student_statement(store, sid)
    assert statement.outstanding == 0
    assert statement.status == InstallmentStatus.paid


@pytest.mark.asyncio
async def test_statement_without_schedule(store: RecordStore, seed) -> None:
    student = await seed(with_class=False)
    statement = await get_student_statement(store, student["id"])
    assert statement.schedule_id is None
    assert statement.lines == []
    assert statement.status == InstallmentStatus.unpaid


@pytest.mark.asyncio
async def test_outstanding_balances_list_only_students_who_owe(store: RecordStore, seed) -> None:
    partial = await seed(matricule="250001")
    settled = await seed(installments=None, matricule="250002", last_name="YAO")
    await seed(with_class=False, installments=None, matricule="250003")
    await _pay(store, partial["id"], 35000, "inscription")
    await _pay(store, partial["id"], 5000, "scolarite", 2)
    await _pay(store, settled["id"], 35000, "inscription")
    await _pay(store, settled["id"], 15000, "scolarite", 2)
    await _pay(store, settled["id"], 10000, "scolarite", 3)

    balances = await list_outstanding_balances(store)

    assert [b.student_id for b in balances] == [partial["id"]]
    owed = balances[0]
    assert owed.matricule == "250001"
    assert [(i.ordinal, i.paid, i.remaining) for i in owed.installments] == [(2, 5000, 10000), (3, 0, 10000)]
    assert owed.total_due == 20000


@pytest.mark.asyncio
async def test_outstanding_balances_filtered_by_class(store: RecordStore, seed) -> None:
    first = await seed(matricule="250001")
    second = await seed(installments=None, matricule="250002")

    everyone = await list_outstanding_balances(store)
    assert [b.student_id for b in everyone] == [first["id"], second["id"]]
    assert all(b.total_due == 60000 for b in everyone)

    one_class = await list_outstanding_balances(store, class_id=second["class_id"])
    assert [b.student_id for b in one_class] == [second["id"]]
