import pytest
from botocore.exceptions import ClientError

# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────


def _client_error(
    op_name: str, *, code: str = "500", message: str | None = None
) -> ClientError:
    """
    Build a botocore ClientError for unit tests.
    """
    msg = message or f"Boom in {op_name}"
    return ClientError(
        error_response={"Error": {"Code": code, "Message": msg}},
        operation_name=op_name,
    )


@pytest.fixture
def client_error():
    """
    Fixture returning a helper function to build ClientError instances.
    Usage:
        err = client_error("Query")
    """
    return _client_error


# ─────────────────────────────────────────────────────────────
# Fake DynamoDB Table + batch_writer
# ─────────────────────────────────────────────────────────────


OP_NAMES = {
    "query": "Query",
    "scan": "Scan",
    "get_item": "GetItem",
    "put_item": "PutItem",
    "update_item": "UpdateItem",
    "batch_delete": "BatchWriteItem",
}


class FakeBatchWriter:
    """
    Minimal stand-in for DynamoDB's batch_writer.
    Forwards delete_item calls to the parent FakeTable.
    """

    def __init__(self, table: "FakeTable"):
        self._table = table

    def __enter__(self) -> "FakeBatchWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        # Don't suppress exceptions
        return False

    def delete_item(self, Key: dict) -> None:
        self._table._maybe_fail("batch_delete")
        self._table.deleted_keys.append(Key)


class FakeTable:
    """
    A lightweight fake for boto3 DynamoDB Table.

    - `response`: dict returned by get/put/update, and by query/scan once
      `pages` runs out
    - `pages`: responses handed out one per query/scan call, in order
    - `fail_on`: operation names that should raise ClientError
      (e.g. {"query", "put_item"})
    - `fail_put_after`: let this many put_item calls succeed, then fail
    """

    def __init__(
        self,
        response: dict | None = None,
        *,
        pages: list[dict] | None = None,
        fail_on: set[str] | None = None,
        fail_put_after: int | None = None,
    ):
        self.response: dict = response or {}
        self.pages: list[dict] = list(pages or [])
        self.fail_on: set[str] = set(fail_on or [])
        self.fail_put_after = fail_put_after

        self.query_calls: list[dict] = []
        self.scan_calls: list[dict] = []
        self.last_get_kwargs: dict | None = None
        self.last_update_kwargs: dict | None = None

        self.put_items: list[dict] = []
        self.deleted_keys: list[dict] = []

    def _maybe_fail(self, op: str):
        name = OP_NAMES[op]
        if op in self.fail_on or name in self.fail_on:
            raise _client_error(name)

    def _next_page(self) -> dict:
        return self.pages.pop(0) if self.pages else self.response

    @property
    def last_query_kwargs(self) -> dict | None:
        return self.query_calls[-1] if self.query_calls else None

    def query(self, **kwargs):
        self._maybe_fail("query")
        self.query_calls.append(dict(kwargs))
        return self._next_page()

    def scan(self, **kwargs):
        self._maybe_fail("scan")
        self.scan_calls.append(dict(kwargs))
        return self._next_page()

    def get_item(self, **kwargs):
        self._maybe_fail("get_item")
        self.last_get_kwargs = kwargs
        return self.response

    def put_item(self, **kwargs):
        self._maybe_fail("put_item")
        if self.fail_put_after is not None and len(self.put_items) >= self.fail_put_after:
            raise _client_error("PutItem")
        self.put_items.append(kwargs["Item"])
        return self.response

    def update_item(self, **kwargs):
        self._maybe_fail("update_item")
        self.last_update_kwargs = kwargs
        return self.response

    def batch_writer(self):
        return FakeBatchWriter(self)


# ─────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────


@pytest.fixture
def fake_table() -> FakeTable:
    """
    Fixture returning a FakeTable instance.
    Tests can override FakeTable.response / FakeTable.pages to simulate DynamoDB.
    """
    return FakeTable()


@pytest.fixture
def make_table():
    """Build a FakeTable with custom pages or failures."""
    return FakeTable


@pytest.fixture
def failing_query_table() -> FakeTable:
    return FakeTable(fail_on={"query"})


@pytest.fixture
def failing_scan_table() -> FakeTable:
    return FakeTable(fail_on={"scan"})


@pytest.fixture
def failing_get_table() -> FakeTable:
    return FakeTable(fail_on={"get_item"})


@pytest.fixture
def failing_put_table() -> FakeTable:
    return FakeTable(fail_on={"put_item"})


@pytest.fixture
def failing_update_table() -> FakeTable:
    return FakeTable(fail_on={"update_item"})


@pytest.fixture
def failing_delete_table() -> FakeTable:
    return FakeTable(fail_on={"batch_delete"})
