from pointhub.db import open_store
from pointhub.services import class_svc, student_svc
from pointhub.services.seed_svc import DEMO_CLASS_NAME, DEMO_STUDENT_POINTS, load_demo_data


def test_first_run_seeds_one_class_and_student(db_path):
    store = open_store(db_path, seed=True)
    try:
        classes = class_svc.list_classes(store)
        assert len(classes) == 1
        assert classes[0].name == DEMO_CLASS_NAME
        assert classes[0].student_count == 1

        students = student_svc.list_students(store)
        assert len(students) == 1
        assert students[0].class_id == classes[0].id
        assert students[0].class_name == DEMO_CLASS_NAME
        assert students[0].points == DEMO_STUDENT_POINTS
    finally:
        store.close()


def test_seed_is_noop_when_classes_exist(store, make_class):
    make_class("Mine")
    assert load_demo_data(store) is False
    names = [c.name for c in class_svc.list_classes(store)]
    assert names == ["Mine"]


def test_seed_runs_once_across_restarts(db_path):
    open_store(db_path, seed=True).close()
    store = open_store(db_path, seed=True)
    try:
        assert len(class_svc.list_classes(store)) == 1
    finally:
        store.close()
