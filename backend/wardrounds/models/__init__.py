from wardrounds.models.user import User
from wardrounds.models.doctor import Doctor, Specialty
from wardrounds.models.admission import (
    Patient, Insurer, Registration, Ward, Room, InpatientStay, AttendingDoctor,
)
from wardrounds.models.clinical_note import ClinicalNote
from wardrounds.models.notification import NotificationQueue, PushToken

__all__ = ["User", "Doctor", "Specialty", "Patient", "Insurer", "Registration", "Ward", "Room",
           "InpatientStay", "AttendingDoctor", "ClinicalNote", "NotificationQueue", "PushToken"]
