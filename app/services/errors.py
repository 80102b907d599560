class RegistrationError(Exception):
    """Base class for rejections raised by the registration services."""

    code = "REGISTRATION_ERROR"
    status_code = 400
    default_message = "Registration request rejected."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def detail(self) -> dict:
        return {"code": self.code, "message": str(self)}


class EventNotFoundError(RegistrationError):
    code = "EVENT_NOT_FOUND"
    status_code = 404
    default_message = "Event not found or inactive."


class DuplicateRegistrationError(RegistrationError):
    code = "DUPLICATE_REGISTRATION"
    status_code = 409
    default_message = "This email is already registered for the event."


class EventFullError(RegistrationError):
    code = "EVENT_FULL"
    status_code = 409
    default_message = "Event is full."


class RegistrationNotFoundError(RegistrationError):
    code = "REGISTRATION_NOT_FOUND"
    status_code = 404
    default_message = "Registration not found."


class CapacityBelowOccupancyError(RegistrationError):
    code = "CAPACITY_BELOW_OCCUPANCY"
    status_code = 409
    default_message = "Capacity cannot be lower than the current number of registrations."


class StoreUnavailableError(RegistrationError):
    code = "STORE_UNAVAILABLE"
    status_code = 503
    default_message = "Registration store unavailable, please try again."
