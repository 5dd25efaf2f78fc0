from __future__ import annotations


class TurnInError(Exception):
    status_code = 500
    public_message = "Error generating PDF"


class MalformedEnvelopeError(TurnInError):
    status_code = 400
    public_message = "Invalid form data"


class RenderError(TurnInError):
    public_message = "Error generating PDF"


class PersistError(TurnInError):
    public_message = "Error saving PDF"


class NotificationError(TurnInError):
    public_message = "Error sending notification"
