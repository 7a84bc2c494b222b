"""In-memory stand-in for the subset of pymongo's async collection API the services use.

Every operation runs without awaiting anything internally, so each call is
atomic with respect to other tasks on the event loop, like a single-document
MongoDB write.
"""

import copy
import operator
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

_MISSING = object()

_EXPR_COMPARISONS = {"$lt": operator.lt, "$lte": operator.le, "$gt": operator.gt, "$gte": operator.ge, "$eq": operator.eq}


@dataclass
class FakeInsertOneResult:
    inserted_id: Any


@dataclass
class FakeUpdateResult:
    matched_count: int
    modified_count: int
    upserted_id: Any = None


@dataclass
class FakeDeleteResult:
    deleted_count: int


def _resolve(doc: dict[str, Any], path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _assign(doc: dict[str, Any], path: str, value: Any) -> None:
    *parents, last = path.split(".")
    target = doc
    for part in parents:
        target = target.setdefault(part, {})
    target[last] = value


def _equals(actual: Any, expected: Any) -> bool:
    if isinstance(actual, list) and not isinstance(expected, list):
        return expected in actual
    return actual == expected


def _matches_condition(actual: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and condition and all(key.startswith("$") for key in condition):
        for operator, operand in condition.items():
            if operator == "$eq" and not (actual is not _MISSING and _equals(actual, operand)):
                return False
            if operator == "$ne" and actual is not _MISSING and _equals(actual, operand):
                return False
            if operator == "$gt" and not (actual is not _MISSING and actual is not None and actual > operand):
                return False
            if operator == "$gte" and not (actual is not _MISSING and actual is not None and actual >= operand):
                return False
            if operator == "$lt" and not (actual is not _MISSING and actual is not None and actual < operand):
                return False
            if operator == "$in" and not (actual is not _MISSING and any(_equals(actual, v) for v in operand)):
                return False
            if operator == "$exists" and (actual is not _MISSING) != bool(operand):
                return False
        return True
    if actual is _MISSING:
        return condition is None
    return _equals(actual, condition)


def _expr_operand(doc: dict[str, Any], operand: Any) -> Any:
    if isinstance(operand, str) and operand.startswith("$"):
        value = _resolve(doc, operand[1:])
        return None if value is _MISSING else value
    return operand


def _matches_expr(doc: dict[str, Any], expr: dict[str, Any]) -> bool:
    """Field-to-field comparisons such as {"$lt": ["$a", "$b"]}."""
    for name, (left, right) in expr.items():
        left, right = _expr_operand(doc, left), _expr_operand(doc, right)
        if left is None or right is None:
            # null sorts below every number
            left, right = left is not None, right is not None
        if not _EXPR_COMPARISONS[name](left, right):
            return False
    return True


def matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(
        _matches_expr(doc, condition) if path == "$expr" else _matches_condition(_resolve(doc, path), condition)
        for path, condition in query.items()
    )


def _project(doc: dict[str, Any], projection: dict[str, Any] | None) -> dict[str, Any]:
    if not projection:
        return copy.deepcopy(doc)
    fields = {path.split(".")[0] for path, include in projection.items() if include}
    fields.add("_id")
    return {key: copy.deepcopy(value) for key, value in doc.items() if key in fields}


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, keys: list[tuple[str, int]] | str, direction: int = 1) -> "FakeCursor":
        if isinstance(keys, str):
            keys = [(keys, direction)]
        # Stable sorts applied from the least significant key
        for path, order in reversed(keys):

            def sort_key(doc: dict[str, Any], path: str = path) -> tuple[bool, Any]:
                value = _resolve(doc, path)
                return (value is not _MISSING and value is not None, value if value is not _MISSING else None)

            self._docs.sort(key=sort_key, reverse=order < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._skip = count
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._limit = count
        return self

    def _window(self) -> list[dict[str, Any]]:
        docs = self._docs[self._skip :]
        return docs[: self._limit] if self._limit else docs

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        docs = self._window()
        return docs[:length] if length else docs

    def __aiter__(self) -> "FakeCursor":
        self._iter = iter(self._window())
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.unique_indexes: list[tuple[str, ...]] = []
        self.indexes: list[list[tuple[str, int]]] = []
        # operation name -> exception raised by the next call of that operation
        self.failures: dict[str, Exception] = {}

    def fail_next(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.pop(operation, None)
        if error is not None:
            raise error

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        self.indexes.append(keys)
        if unique:
            self.unique_indexes.append(tuple(path for path, _direction in keys))
        return "_".join(f"{path}_{direction}" for path, direction in keys)

    def _check_unique(self, candidate: dict[str, Any], ignore: dict[str, Any] | None = None) -> None:
        for other in self.docs:
            if other is ignore:
                continue
            if other["_id"] == candidate["_id"]:
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: _id_", 11000)
            for index in self.unique_indexes:
                values = tuple(_resolve(candidate, path) for path in index)
                if values == tuple(_resolve(other, path) for path in index):
                    raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {index}", 11000)

    def _first(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next((doc for doc in self.docs if matches(doc, query)), None)

    async def insert_one(self, document: dict[str, Any]) -> FakeInsertOneResult:
        self._maybe_fail("insert_one")
        doc = copy.deepcopy(document)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return FakeInsertOneResult(inserted_id=doc["_id"])

    async def find_one(self, query: dict[str, Any] | None = None, projection: dict[str, Any] | None = None) -> dict[str, Any] | None:
        self._maybe_fail("find_one")
        doc = self._first(query or {})
        return _project(doc, projection) if doc is not None else None

    def find(self, query: dict[str, Any] | None = None, projection: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor([_project(doc, projection) for doc in self.docs if matches(doc, query or {})])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for doc in self.docs if matches(doc, query))

    def _apply_update(self, doc: dict[str, Any], update: dict[str, Any], inserting: bool) -> None:
        for operator, fields in update.items():
            if operator == "$set" or (operator == "$setOnInsert" and inserting):
                for path, value in fields.items():
                    _assign(doc, path, copy.deepcopy(value))
            elif operator == "$inc":
                for path, amount in fields.items():
                    current = _resolve(doc, path)
                    _assign(doc, path, (0 if current is _MISSING else current) + amount)
            elif operator != "$setOnInsert":
                raise NotImplementedError(f"Update operator {operator} is not supported by the fake")

    def _upsert_document(self, query: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        for path, condition in query.items():
            if not (isinstance(condition, dict) and any(key.startswith("$") for key in condition)):
                _assign(doc, path, copy.deepcopy(condition))
        self._apply_update(doc, update, inserting=True)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return doc

    def _update_matched(self, doc: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
        updated = copy.deepcopy(doc)
        self._apply_update(updated, update, inserting=False)
        self._check_unique(updated, ignore=doc)
        self.docs[self.docs.index(doc)] = updated
        return updated

    async def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> FakeUpdateResult:
        self._maybe_fail("update_one")
        doc = self._first(query)
        if doc is None:
            if not upsert:
                return FakeUpdateResult(matched_count=0, modified_count=0)
            inserted = self._upsert_document(query, update)
            return FakeUpdateResult(matched_count=0, modified_count=0, upserted_id=inserted["_id"])
        self._update_matched(doc, update)
        return FakeUpdateResult(matched_count=1, modified_count=1)

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        upsert: bool = False,
        return_document: bool = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        self._maybe_fail("find_one_and_update")
        doc = self._first(query)
        if doc is None:
            if not upsert:
                return None
            inserted = self._upsert_document(query, update)
            return copy.deepcopy(inserted) if return_document == ReturnDocument.AFTER else None
        updated = self._update_matched(doc, update)
        return copy.deepcopy(updated if return_document == ReturnDocument.AFTER else doc)

    async def find_one_and_delete(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self._maybe_fail("find_one_and_delete")
        doc = self._first(query)
        if doc is None:
            return None
        self.docs.remove(doc)
        return doc

    async def delete_one(self, query: dict[str, Any]) -> FakeDeleteResult:
        doc = self._first(query)
        if doc is None:
            return FakeDeleteResult(deleted_count=0)
        self.docs.remove(doc)
        return FakeDeleteResult(deleted_count=1)

    async def delete_many(self, query: dict[str, Any]) -> FakeDeleteResult:
        remaining = [doc for doc in self.docs if not matches(doc, query)]
        deleted = len(self.docs) - len(remaining)
        self.docs = remaining
        return FakeDeleteResult(deleted_count=deleted)


class FakeDatabase:
    def __init__(self, name: str = "workhub_test") -> None:
        self.name = name
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def __getitem__(self, name: str) -> FakeCollection:
        return self.get_collection(name)
