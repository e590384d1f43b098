"""Customer contact capture — commands and handler.

``SaveOrderContact`` stores an email the customer typed in after ordering
(e.g. on the tracking page). ``BackfillCustomerContact`` copies contact
details found in the envelope onto the flat lookup fields; it never
overwrites a value that is already there.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.order.order import OnlineOrder

_FORBIDDEN_EMAIL_CHARS = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def validate_email_address(email) -> str:
    """Return the trimmed address, or raise ValidationError if it is malformed."""
    address = (email or "").strip()
    if not address:
        raise ValidationError({"email": ["Email is required"]})

    invalid = ValidationError({"email": [f"Invalid email address: {address!r}"]})
    if any(ch.isspace() for ch in address) or address.count("@") != 1:
        raise invalid

    local_part, domain_part = address.split("@", 1)
    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        raise invalid
    if not domain_part or "." not in domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        raise invalid
    if ".." in address:
        raise invalid
    if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
        raise invalid
    if any(ch in address for ch in _FORBIDDEN_EMAIL_CHARS):
        raise invalid
    return address


@ordering.command(part_of="OnlineOrder")
class SaveOrderContact:
    order_id = String(required=True, max_length=255, sanitize=False)
    email = String(required=True, max_length=254, sanitize=False)


@ordering.command(part_of="OnlineOrder")
class BackfillCustomerContact:
    order_id = String(required=True, max_length=255, sanitize=False)
    email = String(max_length=254, sanitize=False)
    name = String(max_length=255, sanitize=False)
    phone = String(max_length=50, sanitize=False)


@ordering.command_handler(part_of=OnlineOrder)
class OrderContactHandler:
    @handle(SaveOrderContact)
    def save_contact(self, command):
        email = validate_email_address(command.email)

        repo = current_domain.repository_for(OnlineOrder)
        order = repo.find_by_order_id(command.order_id)
        order.update_contact_email(email)
        repo.add(order)

        logger.info("order_contact_saved", order_id=order.order_id)
        return {"order_id": order.order_id, "email": email}

    @handle(BackfillCustomerContact)
    def backfill_contact(self, command):
        repo = current_domain.repository_for(OnlineOrder)
        order = repo.find_by_order_id(command.order_id)
        if not order.record_contact(email=command.email, name=command.name, phone=command.phone):
            return False

        repo.add(order)
        logger.info("customer_contact_backfilled", order_id=order.order_id)
        return True
