"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.order.order import OnlineOrder
from ordering.pipeline.confirmation import submit_direct_order
from ordering.pipeline.status_updates import update_order_status
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _mark(order_id, status, error, email=None):
    try:
        return update_order_status(order_id, status, email_override=email)
    except ValidationError as exc:
        error["exc"] = exc
        return None


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a confirmed order "{order_id}" for "{email}"'),
    target_fixture="order_id",
)
def confirmed_order(order_id, email):
    submit_direct_order(
        {
            "orderId": order_id,
            "revenue": 2500,
            "cost": 1500,
            "items": [{"name": "Rice & Curry", "qty": 1, "unitPrice": 2500, "lineTotal": 2500}],
            "customer": {"email": email},
        }
    )
    return order_id


@given(
    parsers.cfparse('a confirmed order "{order_id}" without contact details'),
    target_fixture="order_id",
)
def confirmed_order_without_contact(order_id):
    submit_direct_order({"orderId": order_id, "revenue": 1200})
    return order_id


@given(parsers.cfparse('the kitchen has marked the order "{status}"'))
def order_already_marked(order_id, status):
    update_order_status(order_id, status)


@given("the mail server is rejecting messages")
def mail_server_rejecting(email_channel):
    email_channel.configure(should_succeed=False, failure_reason="Mailbox unavailable")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.cfparse('the kitchen marks the order "{status:w}"'),
    target_fixture="result",
)
def kitchen_marks(order_id, status, error):
    return _mark(order_id, status, error)


@when(
    parsers.cfparse('the kitchen marks the order "{status:w}" notifying "{email}"'),
    target_fixture="result",
)
def kitchen_marks_with_override(order_id, status, email, error):
    return _mark(order_id, status, error, email=email)


@when("the mail server recovers")
def mail_server_recovers(email_channel):
    email_channel.configure(should_succeed=True)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    order = current_domain.repository_for(OnlineOrder).find_by_order_id(order_id)
    assert order.status == status


@then(parsers.cfparse('the update is rejected with "{message}"'))
def update_rejected(error, message):
    assert error["exc"] is not None
    assert message in error["exc"].messages["status"]


@then(parsers.cfparse('the notification outcome is "{outcome}"'))
def notification_outcome_is(result, outcome):
    assert result.notification is not None
    assert result.notification.status.value == outcome


@then(parsers.cfparse('{count:d} email was sent to "{email}"'))
@then(parsers.cfparse('{count:d} emails were sent to "{email}"'))
def emails_sent_to(email_channel, count, email):
    assert [sent["to"] for sent in email_channel.sent_emails].count(email) == count


@then(parsers.cfparse('the email attaches "{filename}"'))
def email_attaches(email_channel, filename):
    attachments = email_channel.sent_emails[-1]["attachments"]
    assert [attachment.filename for attachment in attachments] == [filename]
