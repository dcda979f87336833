"""Application tests for order commands: create → confirm → pay → ship → deliver, and cancellation."""

import json

import pytest
from ordering.errors import BusinessRuleViolation, StateConflictError
from ordering.order.cancellation import CancelOrder
from ordering.order.confirmation import ConfirmOrder
from ordering.order.creation import CreateOrder
from ordering.order.discounts import ApplyOrderDiscount
from ordering.order.fulfillment import MarkDelivered, MarkInProcess, MarkShipped
from ordering.order.order import Order, OrderStatus, PaymentStatus
from ordering.order.payment import ProcessPayment
from ordering.queries import get_order, list_orders
from ordering.shared.money import Money
from protean import current_domain
from protean.exceptions import ValidationError


def _create_order(shipping_address, customer_id="cust-001", discount=None):
    return current_domain.process(
        CreateOrder(
            customer_id=customer_id,
            items=json.dumps(
                [
                    {
                        "product_id": "prod-001",
                        "product_name": "Café de Chiapas",
                        "sku": "CAF-001",
                        "quantity": 2,
                        "unit_price": "150",
                    },
                    {
                        "product_id": "prod-002",
                        "product_name": "Taza de talavera",
                        "sku": "TAZ-002",
                        "quantity": 1,
                        "unit_price": "99.90",
                    },
                ]
            ),
            shipping_address=json.dumps(shipping_address),
            discount=discount,
        ),
        asynchronous=False,
    )


class TestCreateOrder:
    def test_create_order_persists(self, shipping_address):
        order_id = _create_order(shipping_address)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PENDING.value
        assert order.total == Money.of("399.90", "MXN")
        assert order.shipping_address.postal_code == "03940"

    def test_create_order_with_discount(self, shipping_address):
        order_id = _create_order(shipping_address, discount="50")
        assert get_order(order_id).total == Money.of("349.90", "MXN")

    def test_discount_above_cap_is_rejected(self, shipping_address):
        with pytest.raises(BusinessRuleViolation):
            _create_order(shipping_address, discount="200")
        assert list_orders() == []

    def test_invalid_address_is_rejected(self, shipping_address):
        with pytest.raises(ValidationError):
            _create_order({**shipping_address, "contact_phone": "12345"})


class TestOrderLifecycleCommands:
    def test_happy_path(self, shipping_address):
        order_id = _create_order(shipping_address)

        current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)
        current_domain.process(ProcessPayment(order_id=order_id, payment_reference="REF1"), asynchronous=False)
        current_domain.process(
            MarkShipped(order_id=order_id, tracking_number="TRACK123", carrier="Estafeta"),
            asynchronous=False,
        )
        current_domain.process(MarkDelivered(order_id=order_id), asynchronous=False)

        order = get_order(order_id)
        assert order.status == OrderStatus.DELIVERED.value
        assert order.payment_summary.status == PaymentStatus.COMPLETED.value
        assert order.payment_summary.method == "card"
        assert order.shipping_info.carrier == "Estafeta"
        assert [c.to_status for c in order.history] == ["Confirmed", "Preparation", "Shipped", "Delivered"]

    def test_mark_in_process(self, shipping_address):
        order_id = _create_order(shipping_address)
        current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)
        current_domain.process(MarkInProcess(order_id=order_id), asynchronous=False)

        assert get_order(order_id).status == OrderStatus.PREPARATION.value

    def test_confirm_twice_is_rejected_and_history_unchanged(self, shipping_address):
        order_id = _create_order(shipping_address)
        current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)

        with pytest.raises(StateConflictError):
            current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)
        assert len(get_order(order_id).history) == 1

    def test_cancel_then_confirm(self, shipping_address):
        order_id = _create_order(shipping_address)
        current_domain.process(
            CancelOrder(order_id=order_id, reason="Customer requested cancellation"),
            asynchronous=False,
        )
        order = get_order(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "Customer requested cancellation"

        with pytest.raises(StateConflictError):
            current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)

    def test_apply_order_discount(self, shipping_address):
        order_id = _create_order(shipping_address)
        amount = current_domain.process(
            ApplyOrderDiscount(order_id=order_id, percentage=10.0),
            asynchronous=False,
        )

        assert amount == "39.99"
        assert get_order(order_id).total == Money.of("359.91", "MXN")


class TestOrderQueries:
    def test_list_orders(self, shipping_address):
        first = _create_order(shipping_address, customer_id="cust-001")
        second = _create_order(shipping_address, customer_id="cust-002")

        assert {str(o.id) for o in list_orders()} == {first, second}
        assert [str(o.id) for o in list_orders(customer_id="cust-002")] == [second]


class TestOrderRoundTrip:
    def test_reload_preserves_items_totals_and_history(self, shipping_address):
        order_id = _create_order(shipping_address, discount="25.50")
        current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)
        current_domain.process(ProcessPayment(order_id=order_id, payment_reference="REF1"), asynchronous=False)

        first = get_order(order_id)
        current_domain.repository_for(Order).add(first)
        second = get_order(order_id)

        assert [str(i.product_id) for i in second.items] == ["prod-001", "prod-002"]
        assert [(i.quantity, i.unit_price) for i in second.items] == [(i.quantity, i.unit_price) for i in first.items]
        assert second.discount == Money.of("25.50", "MXN")
        assert second.total == first.total
        assert second.status == first.status
        assert second.status_history == first.status_history
        assert second.shipping_address == first.shipping_address
        assert second.payment_summary == first.payment_summary


class TestCreateOrderMalformedInput:
    def _create(self, shipping_address, items, address=None):
        return current_domain.process(
            CreateOrder(
                customer_id="cust-001",
                items=items,
                shipping_address=address if address is not None else json.dumps(shipping_address),
            ),
            asynchronous=False,
        )

    def test_items_that_are_not_json(self, shipping_address):
        with pytest.raises(ValidationError) as exc:
            self._create(shipping_address, "not json")
        assert "items is not valid JSON" in str(exc.value)

    def test_items_that_are_not_a_list(self, shipping_address):
        with pytest.raises(ValidationError) as exc:
            self._create(shipping_address, json.dumps({"product_id": "prod-001"}))
        assert "items must be a JSON list" in str(exc.value)

    def test_item_missing_product_name(self, shipping_address):
        items = json.dumps([{"product_id": "prod-001", "quantity": 1, "unit_price": "10"}])

        with pytest.raises(ValidationError) as exc:
            self._create(shipping_address, items)
        assert "missing product_name" in str(exc.value)

    def test_item_missing_several_keys(self, shipping_address):
        with pytest.raises(ValidationError) as exc:
            self._create(shipping_address, json.dumps([{"product_name": "Café de Chiapas"}]))
        assert "missing product_id, quantity, unit_price" in str(exc.value)

    def test_item_that_is_not_an_object(self, shipping_address):
        with pytest.raises(ValidationError) as exc:
            self._create(shipping_address, json.dumps(["prod-001"]))
        assert "Order items must be objects" in str(exc.value)

    def test_shipping_address_that_is_not_json(self, shipping_address):
        items = json.dumps(
            [{"product_id": "prod-001", "product_name": "Café de Chiapas", "quantity": 1, "unit_price": "10"}]
        )
        with pytest.raises(ValidationError) as exc:
            self._create(shipping_address, items, address="{street")
        assert "shipping_address is not valid JSON" in str(exc.value)
        assert list_orders() == []


class TestOrderComposition:
    def test_saved_pending_order_still_accepts_items(self, shipping_address):
        order_id = _create_order(shipping_address)

        order = get_order(order_id)
        order.add_item("prod-003", "Mole poblano", "MOL-003", 1, Money.of(50, "MXN"))
        current_domain.repository_for(Order).add(order)

        reloaded = get_order(order_id)
        assert len(reloaded.items) == 3
        assert reloaded.total == Money.of("449.90", "MXN")

    def test_confirmed_order_no_longer_accepts_items(self, shipping_address):
        order_id = _create_order(shipping_address)
        current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)

        with pytest.raises(StateConflictError):
            get_order(order_id).add_item("prod-003", "Mole poblano", "MOL-003", 1, Money.of(50, "MXN"))
