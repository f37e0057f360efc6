import pytest

from lessonshop.constants import DEFAULT_ICON, STATIC_LESSONS
from lessonshop.store.catalog import Catalog, Lesson

from conftest import lesson_records


@pytest.fixture
def catalog():
    c = Catalog()
    c.load(lesson_records())
    return c


class TestLoad:
    def test_icons_resolved_from_subject(self, catalog):
        assert catalog.get(1).icon == "fas fa-calculator"
        assert catalog.get(3).icon == "fas fa-palette"

    def test_unmapped_subject_gets_generic_icon(self, catalog):
        # "english" in lower case is not in the icon map
        assert catalog.get(2).icon == DEFAULT_ICON

    def test_remote_id_taken_from_underscore_id(self, catalog):
        assert catalog.get(1).remote_id == "a1"

    def test_record_with_only_underscore_id(self):
        lesson = Lesson.from_record({"_id": "x9", "subject": "Music", "location": "Bristol", "price": 90, "spaces": 3})
        assert lesson.id == "x9"
        assert lesson.remote_id == "x9"

    def test_null_spaces_rejected(self):
        with pytest.raises(ValueError):
            Lesson.from_record({"id": 1, "subject": "Math", "location": "L", "price": 1, "spaces": None})

    def test_non_object_record_rejected(self):
        with pytest.raises(ValueError):
            Lesson.from_record("oops")

    def test_negative_spaces_rejected(self):
        with pytest.raises(ValueError):
            Lesson.from_record({"id": 1, "subject": "Math", "location": "L", "price": 1, "spaces": -1})

    def test_static_list(self):
        c = Catalog()
        lessons = c.load(STATIC_LESSONS)
        assert len(lessons) == 10
        assert c.unique_locations() == 8
        assert c.total_spaces() == 50

    def test_listener_notified_on_load(self):
        seen = []
        c = Catalog()
        c.subscribe(lambda cat: seen.append(len(cat)))
        c.load(lesson_records())
        assert seen == [4]


class TestSortedView:
    def test_strings_case_insensitive(self, catalog):
        subjects = [lesson.subject for lesson in catalog.sorted_view("subject", "asc")]
        assert subjects[:2] in (["Art", "art"], ["art", "Art"])
        assert subjects[2:] == ["english", "Math"]

    def test_desc_reverses(self, catalog):
        asc = [lesson.price for lesson in catalog.sorted_view("price", "asc")]
        desc = [lesson.price for lesson in catalog.sorted_view("price", "desc")]
        assert asc == [80, 90, 100, 110]
        assert desc == list(reversed(asc))

    def test_does_not_mutate_catalog(self, catalog):
        before = [lesson.id for lesson in catalog]
        catalog.sorted_view("location", "desc")
        assert [lesson.id for lesson in catalog] == before

    def test_unknown_field(self, catalog):
        with pytest.raises(ValueError):
            catalog.sorted_view("icon", "asc")

    def test_unknown_order(self, catalog):
        with pytest.raises(ValueError):
            catalog.sorted_view("price", "up")


class TestSeats:
    def test_decrement_and_increment(self, catalog):
        catalog.decrement_seat(1)
        assert catalog.get(1).spaces == 4
        catalog.increment_seat(1)
        assert catalog.get(1).spaces == 5

    def test_unknown_id_is_noop(self, catalog):
        total = catalog.total_spaces()
        catalog.decrement_seat(99)
        catalog.increment_seat(99)
        assert catalog.total_spaces() == total

    def test_decrement_never_goes_negative(self, catalog):
        with pytest.raises(ValueError):
            catalog.decrement_seat(3)
        assert catalog.get(3).spaces == 0

    def test_resolve_id_from_string(self, catalog):
        assert catalog.resolve_id(" 2 ") == 2
        assert catalog.resolve_id("42") is None
