import unittest
from unittest.mock import MagicMock

import pytest

from litereg import Container, NotFoundError


class TestMappingSyntax(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_subscript_set_and_get(self):
        self.cont["name"] = "app"
        self.cont["svc"] = self.cont.service(lambda c: {"owner": c["name"]})

        assert self.cont["name"] == "app"
        assert self.cont["svc"] is self.cont.get("svc")
        assert self.cont["svc"] == {"owner": "app"}

    def test_contains_mirrors_has(self):
        self.cont["a"] = None

        assert "a" in self.cont
        assert "b" not in self.cont

    def test_missing_subscript_raises_not_found(self):
        with pytest.raises(NotFoundError):
            self.cont["missing"]

    def test_del_mirrors_delete(self):
        self.cont["a"] = 1

        del self.cont["a"]
        del self.cont["never-set"]

        assert "a" not in self.cont

    def test_len_mirrors_count(self):
        self.cont["a"] = 1
        self.cont["b"] = self.cont.factory(lambda _: 2)

        assert len(self.cont) == self.cont.count() == 2


class TestIteration(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.make = MagicMock(side_effect=lambda _: object())
        self.cont = Container({"name": "app"})
        self.cont.set("svc", self.cont.service(self.make))
        self.cont.set("fresh", self.cont.factory(lambda _: object()))

    def test_iteration_yields_resolved_pairs_in_insertion_order(self):
        pairs = list(self.cont)

        assert [key for key, _ in pairs] == ["name", "svc", "fresh"]
        assert len(pairs) == self.cont.count()
        assert pairs[0] == ("name", "app")
        assert pairs[1][1] is self.cont.get("svc")

    def test_iteration_is_restartable_and_cache_aware(self):
        first = dict(self.cont)
        second = dict(self.cont.items())

        assert first["svc"] is second["svc"]
        assert first["fresh"] is not second["fresh"]
        assert self.make.call_count == 1

    def test_iteration_resolves_lazily(self):
        it = iter(self.cont)

        assert next(it) == ("name", "app")
        self.make.assert_not_called()
        next(it)
        assert self.make.call_count == 1

    def test_entry_added_during_iteration_is_not_visited(self):
        keys = []
        for key, _ in self.cont:
            keys.append(key)
            self.cont.set(f"{key}-copy", 0)

        assert keys == ["name", "svc", "fresh"]
        assert self.cont.count() == 6

    def test_entry_deleted_during_iteration_raises_not_found(self):
        it = iter(self.cont)
        next(it)
        self.cont.delete("svc")

        with pytest.raises(NotFoundError):
            next(it)

    def test_empty_container_iterates_nothing(self):
        assert list(Container()) == []
