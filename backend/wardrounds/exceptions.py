class WardRoundsError(Exception):
    """Base class for errors raised by the ward rounds services."""


class InvalidCredentials(WardRoundsError):
    # Unknown identifier and wrong password share this one message
    def __init__(self):
        super().__init__("invalid credentials")


class InvalidToken(WardRoundsError):
    def __init__(self, reason: str = "invalid token"):
        self.reason = reason
        super().__init__(reason)


class AdmissionNotFound(WardRoundsError):
    def __init__(self, no_rawat: str):
        self.no_rawat = no_rawat
        super().__init__(f"Patient {no_rawat} not found or not your DPJP")


class DoctorNotFound(WardRoundsError):
    def __init__(self, kd_dokter: str):
        self.kd_dokter = kd_dokter
        super().__init__(f"Doctor {kd_dokter} not found")


class InvalidRegistration(WardRoundsError):
    """Push token registration payload is missing required data."""


class PushDeliveryError(WardRoundsError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
