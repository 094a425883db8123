from __future__ import annotations

# pointhub/services/student_svc.py
import uuid

from ..db import Store
from ..domain.models import (
    CreateStudentRequest,
    Student,
    UpdateStudentRequest,
    now_utc,
    student_from_row,
    to_db_ts,
)
from ..errors import InvalidArgumentError, NotFoundError
from ..logs import LogContext
from ..repository import class_repo, student_repo


def list_students(store: Store) -> list[Student]:
    with store.read() as conn:
        return [student_from_row(r) for r in student_repo.list_all(conn)]


def list_students_by_class(store: Store, class_id: str) -> list[Student]:
    with store.read() as conn:
        return [student_from_row(r) for r in student_repo.list_by_class(conn, class_id)]


def get_student(store: Store, student_id: str) -> Student:
    with store.read() as conn:
        row = student_repo.get_one(conn, student_id)
    if row is None:
        raise NotFoundError(f"Student not found: {student_id}")
    return student_from_row(row)


def create_student(store: Store, req: CreateStudentRequest, log: LogContext | None = None) -> Student:
    name = (req.name or "").strip()
    if not name:
        raise InvalidArgumentError("Student name must not be empty")
    created = now_utc()
    student_id = str(uuid.uuid4())
    with store.transaction() as conn:
        class_name = class_repo.get_name(conn, req.class_id)
        if class_name is None:
            raise NotFoundError(f"Class not found: {req.class_id}")
        student_repo.insert(
            conn, student_id, name, (req.student_number or "").strip(), req.points,
            req.class_id, class_name, to_db_ts(created),
        )
        class_repo.refresh_student_count(conn, req.class_id)
        row = student_repo.get_one(conn, student_id)

    student = student_from_row(row)
    if log:
        log.set_entity("STUDENT", student.id)
        log.set_after(student.model_dump(mode="json"))
    return student


def update_student(store: Store, student_id: str, req: UpdateStudentRequest, log: LogContext | None = None) -> Student:
    """
    每个给出的字段单独写一列；换班时 class_id/class_name 一起写，并重算新旧两个班的人数。
    没有任何字段时原样返回当前学生，不写库。
    """
    changes = req.changes()
    if "name" in changes and not changes["name"].strip():
        raise InvalidArgumentError("Student name must not be empty")

    with store.transaction() as conn:
        current = student_repo.get_one(conn, student_id)
        if current is None:
            raise NotFoundError(f"Student not found: {student_id}")
        if not changes:
            return student_from_row(current)

        if "name" in changes:
            student_repo.set_name(conn, student_id, changes["name"].strip())
        if "student_number" in changes:
            student_repo.set_student_number(conn, student_id, changes["student_number"].strip())
        if "points" in changes:
            student_repo.set_points(conn, student_id, changes["points"])

        old_class_id = current["class_id"]
        new_class_id = changes.get("class_id")
        if new_class_id is not None and new_class_id != old_class_id:
            new_class_name = class_repo.get_name(conn, new_class_id)
            if new_class_name is None:
                raise NotFoundError(f"Class not found: {new_class_id}")
            student_repo.set_class(conn, student_id, new_class_id, new_class_name)
            class_repo.refresh_student_count(conn, old_class_id)
            class_repo.refresh_student_count(conn, new_class_id)

        after = student_repo.get_one(conn, student_id)

    updated = student_from_row(after)
    if log:
        log.set_entity("STUDENT", student_id)
        log.set_before(student_from_row(current).model_dump(mode="json"))
        log.set_after(updated.model_dump(mode="json"))
    return updated


def adjust_points(store: Store, student_id: str, delta: int, log: LogContext | None = None) -> Student:
    """积分加减（delta 可为负；积分允许为负）。"""
    with store.transaction() as conn:
        if student_repo.add_points(conn, student_id, delta) == 0:
            raise NotFoundError(f"Student not found: {student_id}")
        row = student_repo.get_one(conn, student_id)
    student = student_from_row(row)
    if log:
        log.set_entity("STUDENT", student_id)
        log.set_after({"delta": delta, "points": student.points})
    return student


def delete_student(store: Store, student_id: str, log: LogContext | None = None) -> None:
    with store.transaction() as conn:
        current = student_repo.get_one(conn, student_id)
        if current is None:
            raise NotFoundError(f"Student not found: {student_id}")
        student_repo.delete(conn, student_id)
        class_repo.refresh_student_count(conn, current["class_id"])
    if log:
        log.set_entity("STUDENT", student_id)
        log.set_before(student_from_row(current).model_dump(mode="json"))
