import pytest

from pointhub.domain.models import UpdateStudentRequest, CreateStudentRequest
from pointhub.errors import InvalidArgumentError, NotFoundError
from pointhub.services import class_svc, student_svc


def _count(store, class_id):
    return class_svc.get_class(store, class_id).student_count


def test_create_student_copies_class_name_and_bumps_count(store, make_class, make_student):
    c = make_class("1A")
    s = make_student(c.id, "Amy", "001", 12)
    assert s.class_name == "1A"
    assert s.points == 12
    assert s.student_number == "001"
    assert _count(store, c.id) == 1


def test_create_student_in_missing_class(store):
    with pytest.raises(NotFoundError):
        student_svc.create_student(store, CreateStudentRequest(name="Amy", class_id="nope"))
    assert student_svc.list_students(store) == []


def test_student_count_tracks_creates_and_deletes(store, make_class, make_student):
    c = make_class()
    ids = [make_student(c.id, f"S{i}", str(i)).id for i in range(5)]
    assert _count(store, c.id) == 5
    student_svc.delete_student(store, ids[0])
    student_svc.delete_student(store, ids[1])
    assert _count(store, c.id) == 3
    assert len(student_svc.list_students_by_class(store, c.id)) == 3


def test_move_student_recomputes_both_classes(store, make_class, make_student):
    a = make_class("1A")
    b = make_class("2B")
    s = make_student(a.id)
    make_student(a.id, "Ben", "002")

    moved = student_svc.update_student(store, s.id, UpdateStudentRequest(class_id=b.id))
    assert moved.class_id == b.id
    assert moved.class_name == "2B"
    assert _count(store, a.id) == 1
    assert _count(store, b.id) == 1


def test_move_to_missing_class_rolls_back(store, make_class, make_student):
    a = make_class("1A")
    s = make_student(a.id, "Amy")
    with pytest.raises(NotFoundError):
        student_svc.update_student(store, s.id, UpdateStudentRequest(name="Changed", class_id="nope"))
    again = student_svc.get_student(store, s.id)
    assert again.name == "Amy"
    assert again.class_id == a.id


def test_update_with_no_fields_returns_current(store, make_class, make_student):
    c = make_class()
    s = make_student(c.id)
    same = student_svc.update_student(store, s.id, UpdateStudentRequest())
    assert same == s


def test_update_missing_student(store):
    with pytest.raises(NotFoundError):
        student_svc.update_student(store, "nope", UpdateStudentRequest(name="x"))


def test_update_single_fields(store, make_class, make_student):
    c = make_class()
    s = make_student(c.id, "Amy", "001", 10)
    updated = student_svc.update_student(store, s.id, UpdateStudentRequest(points=99))
    assert (updated.name, updated.student_number, updated.points) == ("Amy", "001", 99)
    updated = student_svc.update_student(store, s.id, UpdateStudentRequest(student_number="A7"))
    assert updated.student_number == "A7"
    assert updated.points == 99


def test_blank_name_is_rejected(store, make_class, make_student):
    c = make_class()
    with pytest.raises(InvalidArgumentError):
        make_student(c.id, "  ")
    s = make_student(c.id)
    with pytest.raises(InvalidArgumentError):
        student_svc.update_student(store, s.id, UpdateStudentRequest(name=""))


def test_adjust_points_allows_negative(store, make_class, make_student):
    c = make_class()
    s = make_student(c.id, points=3)
    assert student_svc.adjust_points(store, s.id, 5).points == 8
    assert student_svc.adjust_points(store, s.id, -10).points == -2
    with pytest.raises(NotFoundError):
        student_svc.adjust_points(store, "nope", 1)


def test_delete_missing_student(store):
    with pytest.raises(NotFoundError):
        student_svc.delete_student(store, "nope")


def test_numeric_student_numbers_sort_by_value(store, make_class, make_student):
    c = make_class()
    for number in ["10", "B2", "2", "A1", "1"]:
        make_student(c.id, f"S{number}", number)
    numbers = [s.student_number for s in student_svc.list_students_by_class(store, c.id)]
    assert numbers == ["1", "2", "10", "A1", "B2"]


def test_list_students_spans_classes(store, make_class, make_student):
    a = make_class("1A")
    b = make_class("2B")
    make_student(a.id, "Amy", "2")
    make_student(b.id, "Ben", "1")
    assert [s.name for s in student_svc.list_students(store)] == ["Ben", "Amy"]
    assert [s.name for s in student_svc.list_students_by_class(store, a.id)] == ["Amy"]
