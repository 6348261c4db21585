from models.room import Classroom, DurationRule, Laboratory, Room, RoomType, make_room
from models.reservation import Reservation, ReservationKey, ReservationType
from models.catalogue import RoomCatalogue

__all__ = [
    "Classroom",
    "Laboratory",
    "Room",
    "RoomType",
    "DurationRule",
    "make_room",
    "Reservation",
    "ReservationKey",
    "ReservationType",
    "RoomCatalogue",
]
