"""
Domain-specific exception hierarchy for shipping slot scheduling.
"""


class ShippingSlotError(Exception):
    """Base class for all application-level errors."""


class ShipmentNotFoundError(ShippingSlotError):
    """Raised when a shipment index does not exist on the active order."""

    def __init__(self, shipment_index: int):
        self.shipment_index = shipment_index
        super().__init__(f'Cannot find shipment index "{shipment_index}"')


class MethodNotFoundError(ShippingSlotError):
    """Raised when no shipping method has the requested code."""

    def __init__(self, method_code: str):
        self.method_code = method_code
        super().__init__(f'Cannot find shipping method "{method_code}"')


class ConfigMissingError(ShippingSlotError):
    """Raised when a shipping method has no slot configuration."""

    def __init__(self, method_code: str):
        self.method_code = method_code
        super().__init__(f'Cannot find slot configuration for shipping method "{method_code}"')


class InvalidRecurrenceRuleError(ShippingSlotError):
    """Raised when a recurrence pattern cannot be parsed."""


class SlotFullError(ShippingSlotError):
    """Raised when booking an occurrence would exceed its available spots."""

    def __init__(self, method_code: str, timestamp: str):
        self.method_code = method_code
        self.timestamp = timestamp
        super().__init__(f'Slot {timestamp} is full for shipping method "{method_code}"')
