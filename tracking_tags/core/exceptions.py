"""Exceptions raised by the tracking script engine."""


class TrackingScriptError(Exception):
    """Base exception for tracking script generation errors."""

    pass


class CampaignNotFoundError(TrackingScriptError):
    """The campaign referenced by a generation request does not exist."""

    def __init__(self, campaign_id: str):
        self.campaign_id = campaign_id
        super().__init__(f"Campaign not found: {campaign_id}")


class OrderNotFoundError(TrackingScriptError):
    """No live order exists for the requested campaign/publication pair."""

    def __init__(self, campaign_id: str | None = None, publication_id: int | None = None, order_id: str | None = None):
        self.campaign_id = campaign_id
        self.publication_id = publication_id
        self.order_id = order_id
        if order_id:
            message = f"Order not found: {order_id}"
        else:
            message = f"Order not found for campaign {campaign_id} / publication {publication_id}"
        super().__init__(message)


class CreativeNotFoundError(TrackingScriptError):
    """The creative asset referenced by a generation request does not exist."""

    def __init__(self, creative_id: str):
        self.creative_id = creative_id
        super().__init__(f"Creative asset not found: {creative_id}")


class UnknownPlatformError(TrackingScriptError):
    """Strict platform lookup failed for an ad server or ESP identifier."""

    pass


class ScriptValidationError(TrackingScriptError):
    """A requested script cannot be generated as asked."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class InvalidRecordError(TrackingScriptError):
    """A stored campaign, order or creative record cannot be loaded."""

    def __init__(self, kind: str, record_id: str, errors: list[str]):
        self.kind = kind
        self.record_id = record_id
        self.errors = errors
        super().__init__(f"Invalid {kind} record {record_id}: {'; '.join(errors)}")
