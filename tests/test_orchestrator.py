"""State-machine tests against an in-memory gateway (no database)."""
import pytest

from import_engine.errors import RecordError
from import_engine.orchestrator import ImportOrchestrator, Phase, parse_quantity
from import_engine.record_parser import ItemDetail, OrderHeader, Unrecognized
from services.schema_gateway import OrderAccepted, OrderRejected, StoreError


class FakeGateway:
    """Records calls; keeps committed rows; rejects dates listed in bad_dates."""

    def __init__(self, bad_dates=("not-a-date",), refuse_batches=False):
        self.bad_dates = set(bad_dates)
        self.refuse_batches = refuse_batches
        self.calls = []
        self.orders = {}
        self.details = []
        self._pending_orders = {}
        self._pending_details = []
        self._next_id = 1

    def begin_transaction(self):
        self.calls.append("begin")

    def create_order(self, date_text):
        self.calls.append(("create_order", date_text))
        if date_text in self.bad_dates:
            return OrderRejected(f"invalid order date {date_text!r}")
        order_id = self._next_id
        self._next_id += 1
        self._pending_orders[order_id] = date_text
        return OrderAccepted(order_id)

    def batch_insert_details(self, rows):
        self.calls.append(("batch", len(rows)))
        if self.refuse_batches and rows:
            raise StoreError(len(rows), "refused")
        self._pending_details.extend(rows)
        return len(rows)

    def commit(self):
        self.calls.append("commit")
        self.orders.update(self._pending_orders)
        self.details.extend(self._pending_details)
        self._pending_orders, self._pending_details = {}, []

    def rollback(self):
        self.calls.append("rollback")
        self._pending_orders, self._pending_details = {}, []


SCENARIO = [
    "order,2023-01-05",
    "item,3,widget",
    "item,2,gadget",
    "order,not-a-date",
    "item,9,ignored",
    "order,2023-02-10",
    "item,1,thing",
]


@pytest.fixture
def fake():
    return FakeGateway()


def test_scenario(fake):
    report = ImportOrchestrator(fake).run(SCENARIO)

    assert fake.orders == {1: "2023-01-05", 2: "2023-02-10"}
    assert [(d.quantity, d.description, d.order_id) for d in fake.details] == [
        (3, "widget", 1), (2, "gadget", 1), (1, "thing", 2),
    ]
    assert report.details_inserted == 3
    assert report.orders_committed == 2
    assert report.orders_rejected == 1
    assert report.details_dropped == 1
    assert report.total_lines == 7
    assert report.errors[0]["line"] == 4


def test_items_are_buffered_until_the_next_boundary(fake):
    orch = ImportOrchestrator(fake)
    orch.process(OrderHeader("2023-01-05"), 1)
    orch.process(ItemDetail("3", "widget"), 2)

    assert not any(c[0] == "batch" for c in fake.calls if isinstance(c, tuple))
    assert orch.state.phase is Phase.ORDER_OPEN_VALID
    assert orch.state.pending_order_id == 1
    assert len(orch.state.pending_batch) == 1

    orch.process(OrderHeader("2023-01-06"), 3)
    assert ("batch", 1) in fake.calls
    assert fake.details[0].order_id == 1
    assert orch.state.pending_batch == []


def test_rejected_order_opens_invalid_state(fake):
    orch = ImportOrchestrator(fake)
    orch.process(OrderHeader("not-a-date"), 1)

    assert orch.state.phase is Phase.ORDER_OPEN_INVALID
    assert orch.state.pending_order_id is None
    assert orch.state.pending_date_valid is False


def test_invalid_order_is_discarded_without_store_calls(fake):
    ImportOrchestrator(fake).run(["order,not-a-date", "item,1,a", "item,2,b"])

    assert fake.orders == {}
    assert fake.details == []
    assert not any(isinstance(c, tuple) and c[0] == "batch" for c in fake.calls)
    assert fake.calls[-1] == "rollback"


def test_items_before_any_order_are_dropped(fake):
    report = ImportOrchestrator(fake).run(["item,1,a", "item,2,b", "order,2023-01-05"])

    assert fake.details == []
    assert report.details_dropped == 2
    assert report.details_inserted == 0


def test_unrecognized_records_do_not_change_state(fake):
    orch = ImportOrchestrator(fake)
    orch.process(OrderHeader("2023-01-05"), 1)
    before = (orch.state.phase, orch.state.pending_order_id, list(orch.state.pending_batch))

    orch.process(Unrecognized("item,3"), 2)
    orch.process(Unrecognized("garbage"), 3)

    assert (orch.state.phase, orch.state.pending_order_id, orch.state.pending_batch) == before
    assert orch.report.unrecognized == 2


def test_end_of_input_after_empty_order_commits_header(fake):
    report = ImportOrchestrator(fake).run(["order,2023-01-05"])

    assert fake.orders == {1: "2023-01-05"}
    assert fake.calls[-2:] == [("batch", 0), "commit"]
    assert report.orders_committed == 1
    assert report.details_inserted == 0


def test_end_of_input_closes_exactly_once(fake):
    orch = ImportOrchestrator(fake)
    orch.run(["order,2023-01-05", "item,1,a"])

    assert fake.calls.count("commit") == 1
    assert orch.state.phase is Phase.NO_ORDER_OPEN


def test_empty_input_makes_no_store_calls(fake):
    report = ImportOrchestrator(fake).run([])

    assert fake.calls == []
    assert report.details_inserted == 0


def test_consecutive_valid_orders_get_disjoint_details(fake):
    ImportOrchestrator(fake).run([
        "order,2023-01-05", "item,1,a", "item,2,b",
        "order,2023-01-06", "item,3,c",
    ])

    first = {d.description for d in fake.details if d.order_id == 1}
    second = {d.description for d in fake.details if d.order_id == 2}
    assert first == {"a", "b"}
    assert second == {"c"}


def test_bad_quantity_is_fatal(fake):
    orch = ImportOrchestrator(fake)
    with pytest.raises(RecordError) as exc_info:
        orch.run(["order,2023-01-05", "item,1,a", "item,many,b"])

    assert exc_info.value.line == 3
    assert fake.details == []


def test_bad_quantity_in_invalid_order_is_ignored(fake):
    """Items of a rejected order are dropped before their quantity is read."""
    report = ImportOrchestrator(fake).run(["order,not-a-date", "item,many,b"])
    assert report.details_dropped == 1


def test_refused_batch_keeps_order_header():
    fake = FakeGateway(refuse_batches=True)
    report = ImportOrchestrator(fake).run(["order,2023-01-05", "item,1,a", "item,2,b"])

    assert fake.orders == {1: "2023-01-05"}
    assert fake.details == []
    assert report.details_inserted == 0
    assert report.details_failed == 2
    assert report.orders_committed == 1
    assert "detail batch refused" in report.errors[0]["reason"]


def test_tally_is_monotonic(fake):
    orch = ImportOrchestrator(fake)
    seen = []
    for line_no, record in enumerate([
        OrderHeader("2023-01-05"), ItemDetail("1", "a"),
        OrderHeader("not-a-date"), ItemDetail("1", "x"),
        OrderHeader("2023-01-06"), ItemDetail("1", "b"), ItemDetail("1", "c"),
    ], start=1):
        orch.process(record, line_no)
        seen.append(orch.state.tally)
    orch.finish()
    seen.append(orch.state.tally)

    assert seen == sorted(seen)
    assert seen[-1] == 3


@pytest.mark.parametrize("text, expected", [
    ("0", 0), ("3", 3), ("+3", 3), ("-2", -2), ("007", 7),
    ("2147483647", 2**31 - 1), ("-2147483648", -2**31),
])
def test_parse_quantity(text, expected):
    assert parse_quantity(text) == expected


@pytest.mark.parametrize("text", [
    "", "x", "1_000", " 3 ", "3 ", "1.5", "1e3", "٣", "--3",
    "2147483648", "-2147483649", "99999999999999999999",
])
def test_parse_quantity_rejects(text):
    with pytest.raises(ValueError):
        parse_quantity(text)


@pytest.mark.parametrize("text", ["99999999999999999999", "1_000", " 3 ", "٣"])
def test_malformed_quantity_is_fatal_before_any_flush(fake, text):
    orch = ImportOrchestrator(fake)
    with pytest.raises(RecordError) as exc_info:
        orch.run(["order,2023-01-05", f"item,{text},bolt"])

    assert exc_info.value.line == 2
    assert not any(isinstance(c, tuple) and c[0] == "batch" for c in fake.calls)
