"""
兑换记录测试：记录本身不动库存/积分；redeem() 三步同事务，失败整体回滚。
"""
import pytest

from pointhub.domain.models import CreatePurchaseRequest, ShippingStatus
from pointhub.errors import InvalidArgumentError, NotFoundError
from pointhub.services import product_svc, purchase_svc, student_svc


@pytest.fixture()
def shop(make_class, make_student, make_product):
    c = make_class("1A")
    s = make_student(c.id, "Amy", "001", 20)
    p = make_product(c.id, "Pencil", 5, 3)
    return c, s, p


def test_record_snapshots_names_and_leaves_balances(store, shop):
    c, s, p = shop
    rec = purchase_svc.create_purchase_record(
        store, CreatePurchaseRequest(product_id=p.id, student_id=s.id, quantity=2)
    )
    assert rec.product_name == "Pencil"
    assert rec.student_name == "Amy"
    assert rec.points == 5
    assert rec.quantity == 2
    assert rec.total_points == 10
    assert rec.class_id == c.id
    assert rec.shipping_status == ShippingStatus.PENDING

    assert product_svc.get_product(store, p.id).stock == 3
    assert student_svc.get_student(store, s.id).points == 20


def test_record_requires_existing_product_and_student(store, shop):
    _, s, p = shop
    with pytest.raises(NotFoundError):
        purchase_svc.create_purchase_record(store, CreatePurchaseRequest(product_id="nope", student_id=s.id))
    with pytest.raises(NotFoundError):
        purchase_svc.create_purchase_record(store, CreatePurchaseRequest(product_id=p.id, student_id="nope"))
    with pytest.raises(InvalidArgumentError):
        purchase_svc.create_purchase_record(
            store, CreatePurchaseRequest(product_id=p.id, student_id=s.id, quantity=0)
        )


def test_record_survives_product_delete(store, shop):
    c, s, p = shop
    purchase_svc.create_purchase_record(store, CreatePurchaseRequest(product_id=p.id, student_id=s.id))
    product_svc.delete_product(store, p.id)
    records = purchase_svc.list_purchase_records_by_class(store, c.id)
    assert [r.product_name for r in records] == ["Pencil"]


def test_redeem_moves_stock_and_points(store, shop):
    _, s, p = shop
    rec = purchase_svc.redeem(store, CreatePurchaseRequest(product_id=p.id, student_id=s.id, quantity=2))
    assert rec.total_points == 10
    assert product_svc.get_product(store, p.id).stock == 1
    assert student_svc.get_student(store, s.id).points == 10


def test_redeem_insufficient_stock_rolls_back(store, shop):
    c, s, p = shop
    with pytest.raises(InvalidArgumentError, match="Insufficient stock"):
        purchase_svc.redeem(store, CreatePurchaseRequest(product_id=p.id, student_id=s.id, quantity=4))
    assert purchase_svc.list_purchase_records_by_class(store, c.id) == []
    assert product_svc.get_product(store, p.id).stock == 3
    assert student_svc.get_student(store, s.id).points == 20


def test_redeem_insufficient_points_rolls_back(store, shop, make_product):
    c, s, _ = shop
    pricey = make_product(c.id, "Bag", 50, 5)
    with pytest.raises(InvalidArgumentError, match="Insufficient points"):
        purchase_svc.redeem(store, CreatePurchaseRequest(product_id=pricey.id, student_id=s.id))
    assert purchase_svc.list_purchase_records_by_class(store, c.id) == []
    assert product_svc.get_product(store, pricey.id).stock == 5
    assert student_svc.get_student(store, s.id).points == 20


def test_pagination(store, shop):
    c, s, p = shop
    for _ in range(25):
        purchase_svc.create_purchase_record(store, CreatePurchaseRequest(product_id=p.id, student_id=s.id))

    first = purchase_svc.list_purchase_records_page(store, c.id, page=1, page_size=10)
    assert (first.total, first.total_pages, first.current_page, first.page_size) == (25, 3, 1, 10)
    assert len(first.records) == 10

    last = purchase_svc.list_purchase_records_page(store, c.id, page=3, page_size=10)
    assert len(last.records) == 5

    beyond = purchase_svc.list_purchase_records_page(store, c.id, page=9, page_size=10)
    assert beyond.records == []
    assert beyond.total == 25

    seen = {r.id for page in (1, 2, 3)
            for r in purchase_svc.list_purchase_records_page(store, c.id, page, 10).records}
    assert len(seen) == 25


def test_pagination_rejects_bad_arguments(store, shop):
    c, _, _ = shop
    with pytest.raises(InvalidArgumentError):
        purchase_svc.list_purchase_records_page(store, c.id, page=0, page_size=10)
    with pytest.raises(InvalidArgumentError):
        purchase_svc.list_purchase_records_page(store, c.id, page=1, page_size=0)


def test_empty_class_page(store, make_class):
    c = make_class()
    page = purchase_svc.list_purchase_records_page(store, c.id)
    assert (page.total, page.total_pages, page.records) == (0, 0, [])


def test_update_shipping_status(store, shop):
    c, s, p = shop
    rec = purchase_svc.create_purchase_record(store, CreatePurchaseRequest(product_id=p.id, student_id=s.id))
    purchase_svc.update_shipping_status(store, rec.id, "shipped")
    records = purchase_svc.list_purchase_records_by_class(store, c.id)
    assert records[0].shipping_status == ShippingStatus.SHIPPED

    with pytest.raises(InvalidArgumentError):
        purchase_svc.update_shipping_status(store, rec.id, "lost")
    with pytest.raises(NotFoundError):
        purchase_svc.update_shipping_status(store, "nope", "delivered")
